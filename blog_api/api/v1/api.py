"""API router aggregator."""

from fastapi import APIRouter

from blog_api.api.v1.endpoints import auth, categories, posts, testing, users
from blog_api.config import settings

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router)
api_router.include_router(posts.router)
api_router.include_router(users.router)
api_router.include_router(categories.router)

if settings.ENVIRONMENT == "test":
    api_router.include_router(testing.router)

__all__ = ["api_router"]
