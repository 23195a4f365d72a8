"""User administration endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from blog_api.api.deps import get_current_user, get_db, page_params, require_role
from blog_api.core.exceptions import BadRequestError, NotFoundError, PermissionDeniedError
from blog_api.core.log_config import log_security
from blog_api.core.permissions import Role, is_admin
from blog_api.crud import crud_post, crud_user
from blog_api.models.post import PostStatus
from blog_api.models.user import User
from blog_api.schemas.common import PageParams, Pagination, success_response
from blog_api.schemas.post import PostResponse
from blog_api.schemas.user import (
    UserDetailResponse,
    UserResponse,
    UserStats,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = crud_user.get(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get(
    "",
    response_model=dict,
    summary="List users",
    description="""
Paginated user list with optional `role`, `isActive` and `search` filters.

**Access:** admin
""",
)
async def list_users(
    params: PageParams = Depends(page_params),
    role: Optional[Role] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    users, total = crud_user.list_users(
        db, params=params, role=role, is_active=is_active, search=search
    )
    logger.info(f"Users list accessed by admin: {current_user.username}")
    return success_response({
        "users": [UserResponse.model_validate(user) for user in users],
        "pagination": Pagination.build(page=params.page, limit=params.limit, total=total),
    })


@router.get(
    "/stats/overview",
    response_model=dict,
    summary="User statistics",
)
async def user_stats(
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    """Totals, activity, sign-ups in the last 30 days, role breakdown and top authors."""
    stats = UserStats.model_validate(crud_user.get_stats(db))
    logger.info(f"User statistics accessed by admin: {current_user.username}")
    return success_response(stats)


@router.get(
    "/{user_id}",
    response_model=dict,
    summary="Get user",
)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """A user may read their own record; admins may read any."""
    if current_user.id != user_id and not is_admin(current_user):
        log_security("Forbidden profile read", user=current_user.username, target=user_id)
        raise PermissionDeniedError("Access denied. You can only view your own profile.")

    user = _get_user_or_404(db, user_id)
    detail = UserDetailResponse.model_validate(user).model_copy(
        update={"posts_count": crud_user.count_posts(db, user_id=user.id)}
    )
    return success_response({"user": detail})


@router.put(
    "/{user_id}",
    response_model=dict,
    summary="Update user",
    description="""
Update a user's profile. Only admins may change `role` or `isActive`.

**Access:** the user themselves or an admin
""",
)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    caller_is_admin = is_admin(current_user)
    if current_user.id != user_id and not caller_is_admin:
        log_security("Forbidden profile update", user=current_user.username, target=user_id)
        raise PermissionDeniedError("Access denied. You can only update your own profile.")

    changes_privileges = payload.role is not None or "is_active" in payload.model_fields_set
    if changes_privileges and not caller_is_admin:
        log_security("Privilege change denied", user=current_user.username, target=user_id)
        raise PermissionDeniedError("Access denied. Only admins can change roles and active status.")
    if current_user.id == user_id and payload.is_active is False:
        raise BadRequestError("You cannot deactivate your own account")

    user = _get_user_or_404(db, user_id)
    if payload.profile is not None:
        user.apply_profile(payload.profile.model_dump(exclude_unset=True))

    update_data = {}
    if payload.role is not None:
        update_data["role"] = payload.role
    if payload.is_active is not None:
        update_data["is_active"] = payload.is_active
    user = crud_user.update(db, db_obj=user, obj_in=update_data)

    logger.info(f"User updated: {user.username} by {current_user.username}")
    return success_response(
        {"user": UserResponse.model_validate(user)},
        message="User updated successfully",
    )


@router.delete(
    "/{user_id}",
    response_model=dict,
    summary="Delete user",
    description="""
Delete a user and every post they wrote.

**Access:** admin, not on their own account
""",
)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    if current_user.id == user_id:
        raise BadRequestError("You cannot delete your own account")

    user = _get_user_or_404(db, user_id)
    username = user.username
    crud_user.delete_with_posts(db, user=user)
    logger.info(f"User deleted: {username} by admin: {current_user.username}")
    return success_response(message="User and associated posts deleted successfully")


@router.get(
    "/{user_id}/posts",
    response_model=dict,
    summary="List a user's posts",
)
async def list_user_posts(
    user_id: int,
    params: PageParams = Depends(page_params),
    post_status: Optional[PostStatus] = Query(PostStatus.PUBLISHED, alias="status"),
    db: Session = Depends(get_db),
) -> dict:
    """Public; defaults to the author's published posts."""
    user = _get_user_or_404(db, user_id)
    posts, total = crud_post.list_posts(
        db, params=params, status=post_status, author_id=user.id
    )
    return success_response({
        "posts": [PostResponse.model_validate(post) for post in posts],
        "author": {"id": user.id, "username": user.username},
        "pagination": Pagination.build(page=params.page, limit=params.limit, total=total),
    })


@router.post(
    "/{user_id}/deactivate",
    response_model=dict,
    summary="Deactivate user",
)
async def deactivate_user(
    user_id: int,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    if current_user.id == user_id:
        raise BadRequestError("You cannot deactivate your own account")

    user = crud_user.set_active(db, user=_get_user_or_404(db, user_id), is_active=False)
    logger.info(f"User deactivated: {user.username} by admin: {current_user.username}")
    return success_response(
        {"user": UserResponse.model_validate(user)},
        message="User deactivated successfully",
    )


@router.post(
    "/{user_id}/activate",
    response_model=dict,
    summary="Activate user",
)
async def activate_user(
    user_id: int,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    user = crud_user.set_active(db, user=_get_user_or_404(db, user_id), is_active=True)
    logger.info(f"User activated: {user.username} by admin: {current_user.username}")
    return success_response(
        {"user": UserResponse.model_validate(user)},
        message="User activated successfully",
    )
