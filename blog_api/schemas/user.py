"""Pydantic schemas for `User` domain objects."""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ..core.permissions import Role
from .common import CamelModel


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class Profile(CamelModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=500)


class UserRegister(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str
    profile: Optional[Profile] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v.lower()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "username": "jane_doe",
            "email": "jane@example.com",
            "password": "Str0ng!Pass",
            "profile": {"firstName": "Jane", "lastName": "Doe"},
        }
    })


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ProfileUpdate(CamelModel):
    profile: Optional[Profile] = None


class UserUpdate(CamelModel):
    """Update payload for ``PUT /users/{id}``; role and isActive are admin-only."""
    profile: Optional[Profile] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    role: Role
    profile: Profile
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserDetailResponse(UserResponse):
    posts_count: int = 0


class RoleCount(CamelModel):
    role: Role
    count: int


class TopUser(CamelModel):
    id: int
    username: str
    post_count: int


class UserStats(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    new_users: int
    users_by_role: List[RoleCount]
    top_users: List[TopUser]
