"""Pydantic schemas for Post."""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ..models.post import PostStatus, REJECTION_REASON_MAX, REJECTION_REASON_MIN
from .common import CamelModel
from .user import Profile


SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


class Seo(CamelModel):
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: List[str] = []


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """Strip tags, drop empties and duplicates, keep first-seen order."""
    if tags is None:
        return None
    cleaned: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if len(tag) > 50:
            raise ValueError("Each tag cannot exceed 50 characters")
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _clean_title(title: str) -> str:
    title = title.strip()
    if len(title) < 3:
        raise ValueError("Title must be between 3 and 200 characters")
    return title


class PostBase(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=10, max_length=10000)
    category_id: int = Field(..., gt=0, alias="category")
    excerpt: Optional[str] = Field(None, max_length=300)
    featured_image: Optional[str] = Field(None, max_length=500)
    tags: List[str] = []
    seo: Optional[Seo] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class PostCreate(PostBase):
    """Schema for creating a new post. Posts always start as drafts."""
    slug: Optional[str] = Field(None, min_length=3, max_length=100)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not SLUG_PATTERN.match(v):
            raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens")
        return v

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "Getting started with FastAPI",
            "content": "FastAPI is a modern web framework for building APIs...",
            "category": 1,
            "tags": ["python", "fastapi"],
        }
    })


class PostUpdate(CamelModel):
    """Partial update; status changes go through the lifecycle endpoints."""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    content: Optional[str] = Field(None, min_length=10, max_length=10000)
    category_id: Optional[int] = Field(None, gt=0, alias="category")
    excerpt: Optional[str] = Field(None, max_length=300)
    featured_image: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
    seo: Optional[Seo] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(v)


class PostReject(CamelModel):
    reason: str

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        v = v.strip()
        if not REJECTION_REASON_MIN <= len(v) <= REJECTION_REASON_MAX:
            raise ValueError(
                f"Rejection reason must be between {REJECTION_REASON_MIN} and "
                f"{REJECTION_REASON_MAX} characters"
            )
        return v


class PostAuthor(CamelModel):
    id: int
    username: str
    profile: Profile


class PostCategory(CamelModel):
    id: int
    name: str
    slug: str


class PostResponse(CamelModel):
    id: int
    title: str
    content: str
    slug: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    tags: List[str] = []
    seo: Optional[Seo] = None
    status: PostStatus
    is_published: bool
    published_at: Optional[datetime] = None
    is_approved: bool
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    submitted_for_approval: bool
    submitted_at: Optional[datetime] = None
    view_count: int
    like_count: int
    comment_count: int
    reading_time: int
    author_id: int
    author: Optional[PostAuthor] = None
    category_id: int
    category: Optional[PostCategory] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LikeResult(CamelModel):
    like_count: int
    has_liked: bool
