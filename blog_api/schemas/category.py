"""Pydantic schemas for Category."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    slug: Optional[str] = Field(None, min_length=2, max_length=60, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=200)
    parent_id: Optional[int] = Field(None, gt=0)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None
    parent_id: Optional[int] = Field(None, gt=0)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    is_active: bool
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
