"""Test-environment helpers for end-to-end suites.

Mounted only when ``ENVIRONMENT=test``.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import EmailStr
from sqlalchemy import delete
from sqlalchemy.orm import Session

from blog_api.api.deps import get_db
from blog_api.core.exceptions import NotFoundError
from blog_api.core.permissions import Role
from blog_api.core.security import generate_token
from blog_api.crud import crud_user
from blog_api.init_db import seed_categories, seed_user
from blog_api.models.post import Post
from blog_api.models.post_like import PostLike
from blog_api.models.user import User
from blog_api.schemas.common import CamelModel, success_response
from blog_api.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/test",
    tags=["Test utilities"],
)

SEED_USERS = (
    {"username": "testuser", "email": "test@example.com", "password": "Test123!", "role": Role.USER},
    {"username": "adminuser", "email": "admin@example.com", "password": "Admin123!", "role": Role.ADMIN},
)


class EmailPayload(CamelModel):
    email: EmailStr


@router.post("/clear-db", response_model=dict, summary="Delete all users and posts")
async def clear_db(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(delete(PostLike))
        db.execute(delete(Post))
        db.execute(delete(User))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Test database cleared")
    return success_response(message="Database cleared successfully")


@router.post("/seed-data", response_model=dict, summary="Seed test users and categories")
async def seed_data(db: Session = Depends(get_db)) -> dict:
    seed_categories(db)
    for user in SEED_USERS:
        seed_user(db, **user)
    logger.info("Test data seeded")
    return success_response(message="Test data seeded successfully")


@router.post("/make-admin", response_model=dict, summary="Promote a user to admin")
async def make_admin(payload: EmailPayload, db: Session = Depends(get_db)) -> dict:
    user = crud_user.get_by_email(db, payload.email)
    if not user:
        raise NotFoundError("User not found")
    user = crud_user.update(db, db_obj=user, obj_in={"role": Role.ADMIN})
    return success_response(
        {"user": UserResponse.model_validate(user)},
        message="User made admin successfully",
    )


@router.post("/get-token", response_model=dict, summary="Issue a token for a user")
async def get_token(payload: EmailPayload, db: Session = Depends(get_db)) -> dict:
    user = crud_user.get_by_email(db, payload.email)
    if not user:
        raise NotFoundError("User not found")
    return success_response({"token": generate_token(user), "user": UserResponse.model_validate(user)})
