"""
SQLAlchemy models for the blog API
"""

from ..database import Base
from .user import User
from .category import Category
from .post import Post, PostStatus
from .post_like import PostLike

__all__ = [
    "Base",
    "User",
    "Category",
    "Post",
    "PostStatus",
    "PostLike",
]
