from .common import CamelModel, PageParams, Pagination, success_response
from .user import (
    Profile,
    UserRegister,
    UserLogin,
    RefreshRequest,
    ProfileUpdate,
    UserUpdate,
    UserResponse,
    UserDetailResponse,
    UserStats,
)
from .post import (
    Seo,
    PostCreate,
    PostUpdate,
    PostReject,
    PostResponse,
    LikeResult,
)
from .category import CategoryCreate, CategoryUpdate, CategoryResponse

__all__ = [
    "CamelModel",
    "PageParams",
    "Pagination",
    "success_response",
    "Profile",
    "UserRegister",
    "UserLogin",
    "RefreshRequest",
    "ProfileUpdate",
    "UserUpdate",
    "UserResponse",
    "UserDetailResponse",
    "UserStats",
    "Seo",
    "PostCreate",
    "PostUpdate",
    "PostReject",
    "PostResponse",
    "LikeResult",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
]
