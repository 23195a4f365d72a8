"""Post endpoints: CRUD, likes, search and the approval workflow."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blog_api.api.deps import (
    get_current_user,
    get_db,
    page_params,
    require_role,
)
from blog_api.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailed,
)
from blog_api.core.log_config import log_security
from blog_api.core.permissions import Role, is_admin
from blog_api.crud import crud_category, crud_post, crud_post_like
from blog_api.models.post import Post, PostStatus
from blog_api.models.user import User
from blog_api.schemas.common import PageParams, Pagination, success_response
from blog_api.schemas.post import (
    LikeResult,
    PostCreate,
    PostReject,
    PostResponse,
    PostUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
)


def _serialize(posts: List[Post]) -> List[PostResponse]:
    return [PostResponse.model_validate(post) for post in posts]


def _page(posts: List[Post], total: int, params: PageParams, **extra) -> dict:
    data = {
        "posts": _serialize(posts),
        "pagination": Pagination.build(page=params.page, limit=params.limit, total=total),
    }
    data.update(extra)
    return success_response(data)


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = crud_post.get(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post


def _ensure_owner_or_admin(post: Post, user: User, action: str) -> None:
    if post.author_id != user.id and not is_admin(user):
        log_security("Forbidden post access", user=user.username, post_id=post.id, action=action)
        raise PermissionDeniedError(f"Access denied. You can only {action} your own posts.")


def _ensure_category(db: Session, category_id: int) -> None:
    category = crud_category.get(db, category_id)
    if not category or not category.is_active:
        raise ValidationFailed.for_field("category", "Valid category ID is required")


@router.get(
    "",
    response_model=dict,
    summary="List posts",
    description="""
Public list of posts. Filters are combined with AND.

**Query:**
- `status` (default `published`), `category`, `author`, `search`, `tag`
- `page`, `limit`, `sortBy`, `sortOrder`
""",
)
async def list_posts(
    params: PageParams = Depends(page_params),
    post_status: Optional[PostStatus] = Query(PostStatus.PUBLISHED, alias="status"),
    category: Optional[int] = Query(None, gt=0),
    author: Optional[int] = Query(None, gt=0),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    tag: Optional[str] = Query(None, max_length=50),
    db: Session = Depends(get_db),
) -> dict:
    posts, total = crud_post.list_posts(
        db,
        params=params,
        status=post_status,
        category_id=category,
        author_id=author,
        search=search,
        tag=tag,
    )
    return _page(posts, total, params)


@router.get(
    "/my-posts",
    response_model=dict,
    summary="List own posts",
)
async def list_my_posts(
    params: PageParams = Depends(page_params),
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """All of the caller's posts regardless of status unless ``status`` is given."""
    posts, total = crud_post.list_posts(
        db, params=params, status=post_status, author_id=current_user.id
    )
    return _page(posts, total, params)


@router.get(
    "/pending/approval",
    response_model=dict,
    summary="Approval queue",
    description="""
Posts waiting for approval, newest submission first.

**Access:** admin
""",
)
async def list_pending_posts(
    params: PageParams = Depends(page_params),
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    posts, total = crud_post.get_pending(db, params=params)
    return _page(posts, total, params)


@router.get(
    "/search/{query}",
    response_model=dict,
    summary="Search published posts",
)
async def search_posts(
    query: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
) -> dict:
    posts, total = crud_post.list_posts(
        db, params=params, status=PostStatus.PUBLISHED, search=query
    )
    logger.info(f"Post search performed: {query}")
    return _page(posts, total, params, query=query)


@router.get(
    "/{post_id}",
    response_model=dict,
    summary="Get post",
)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db),
) -> dict:
    """Fetch one post. Reading a published post counts as a view."""
    post = _get_post_or_404(db, post_id)
    if post.status == PostStatus.PUBLISHED:
        post = crud_post.increment_view_count(db, post=post)
    return success_response({"post": PostResponse.model_validate(post)})


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
async def create_post(
    post_in: PostCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Create a draft post owned by the caller."""
    _ensure_category(db, post_in.category_id)
    if post_in.slug and crud_post.get_by_slug(db, post_in.slug):
        raise ConflictError("slug")

    post = crud_post.create_post(db, post_in=post_in, author_id=current_user.id)
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post created successfully",
    )


@router.put(
    "/{post_id}",
    response_model=dict,
    summary="Update post",
    description="""
Partial update of a post.

**Access:** author or admin. Status is changed only through the workflow
endpoints; editing a rejected post returns it to draft.
""",
)
async def update_post(
    post_id: int,
    post_in: PostUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    post = _get_post_or_404(db, post_id)
    _ensure_owner_or_admin(post, current_user, "update")
    if post_in.category_id is not None:
        _ensure_category(db, post_in.category_id)

    post = crud_post.update_post(
        db,
        post=post,
        post_in=post_in,
        revised_by_author=post.author_id == current_user.id,
    )
    logger.info(f"Post updated: {post.slug} by {current_user.username}")
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post updated successfully",
    )


@router.delete(
    "/{post_id}",
    response_model=dict,
    summary="Delete post",
)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    post = _get_post_or_404(db, post_id)
    _ensure_owner_or_admin(post, current_user, "delete")
    crud_post.delete(db, id=post.id)
    logger.info(f"Post {post_id} deleted by {current_user.username}")
    return success_response(message="Post deleted successfully")


@router.post(
    "/{post_id}/like",
    response_model=dict,
    summary="Like or unlike a post",
)
async def toggle_like(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    post = _get_post_or_404(db, post_id)
    is_liked, like_count = crud_post_like.toggle_like(db, post=post, user_id=current_user.id)
    return success_response(
        LikeResult(like_count=like_count, has_liked=is_liked),
        message="Post liked" if is_liked else "Post unliked",
    )


@router.post(
    "/{post_id}/submit",
    response_model=dict,
    summary="Submit post for approval",
)
async def submit_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Move the caller's draft to the approval queue."""
    post = _get_post_or_404(db, post_id)
    if post.author_id != current_user.id:
        log_security("Forbidden submit", user=current_user.username, post_id=post_id)
        raise PermissionDeniedError("Access denied. You can only submit your own posts.")

    post = crud_post.submit(db, post_id=post_id)
    if not post:
        raise NotFoundError("Post not found")
    logger.info(f"Post submitted for approval: {post.slug}")
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post submitted for approval successfully",
    )


@router.post(
    "/{post_id}/approve",
    response_model=dict,
    summary="Approve post",
    description="""
Publish a pending post.

**Access:** admin
""",
)
async def approve_post(
    post_id: int,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    post = crud_post.approve(db, post_id=post_id, admin_id=current_user.id)
    if not post:
        raise NotFoundError("Post not found")
    logger.info(f"Post approved: {post.slug} by {current_user.username}")
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post approved successfully",
    )


@router.post(
    "/{post_id}/reject",
    response_model=dict,
    summary="Reject post",
    description="""
Reject a pending post with a reason of 10 to 500 characters.

**Access:** admin
""",
)
async def reject_post(
    post_id: int,
    payload: PostReject,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    post = crud_post.reject(
        db,
        post_id=post_id,
        admin_id=current_user.id,
        reason=payload.reason,
    )
    if not post:
        raise NotFoundError("Post not found")
    logger.info(f"Post rejected: {post.slug} by {current_user.username}")
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post rejected successfully",
    )


@router.post(
    "/{post_id}/archive",
    response_model=dict,
    summary="Archive post",
)
async def archive_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Take a published post out of circulation. Author or admin."""
    post = _get_post_or_404(db, post_id)
    _ensure_owner_or_admin(post, current_user, "archive")

    post = crud_post.archive(db, post_id=post_id)
    if not post:
        raise NotFoundError("Post not found")
    return success_response(
        {"post": PostResponse.model_validate(post)},
        message="Post archived successfully",
    )
