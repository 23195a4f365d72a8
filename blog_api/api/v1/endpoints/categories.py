"""Category endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blog_api.api.deps import get_db, require_role
from blog_api.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from blog_api.core.permissions import Role
from blog_api.crud import crud_category
from blog_api.models.category import Category
from blog_api.models.user import User
from blog_api.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from blog_api.schemas.common import success_response

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


def _ensure_parent(db: Session, parent_id, category_id=None) -> None:
    if parent_id is None:
        return
    parent = crud_category.get(db, parent_id)
    if parent is None:
        raise ValidationFailed.for_field("parentId", "Valid parent category ID is required")

    # The new parent must not sit below the category being moved
    seen = set()
    while parent is not None and parent.id not in seen:
        if parent.id == category_id:
            raise ValidationFailed.for_field("parentId", "A category cannot be nested under itself")
        seen.add(parent.id)
        parent = parent.parent


@router.get(
    "",
    response_model=dict,
    summary="List active categories",
)
async def list_categories(db: Session = Depends(get_db)) -> dict:
    categories = crud_category.get_active(db)
    return success_response({
        "categories": [CategoryResponse.model_validate(category) for category in categories],
    })


@router.get(
    "/{slug}",
    response_model=dict,
    summary="Get category by slug",
)
async def get_category(slug: str, db: Session = Depends(get_db)) -> dict:
    category = crud_category.get_by_slug(db, slug)
    if not category:
        raise NotFoundError("Category not found")
    return success_response({"category": CategoryResponse.model_validate(category)})


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
    description="""
Create a category. The slug is derived from the name when omitted.

**Access:** admin
""",
)
async def create_category(
    category_in: CategoryCreate,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    if crud_category.get_by_name(db, category_in.name):
        raise ConflictError("name")
    slug = category_in.slug or Category.slug_for(category_in.name)
    if crud_category.get_by_slug(db, slug):
        raise ConflictError("slug")
    _ensure_parent(db, category_in.parent_id)

    category = crud_category.create_category(db, category_in=category_in)
    logger.info(f"Category created: {category.slug} by {current_user.username}")
    return success_response(
        {"category": CategoryResponse.model_validate(category)},
        message="Category created successfully",
    )


@router.put(
    "/{category_id}",
    response_model=dict,
    summary="Update category",
)
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    current_user: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    """Admin only. Renaming does not change the slug."""
    category = crud_category.get(db, category_id)
    if not category:
        raise NotFoundError("Category not found")
    if category_in.name and category_in.name != category.name and crud_category.get_by_name(db, category_in.name):
        raise ConflictError("name")
    _ensure_parent(db, category_in.parent_id, category_id)

    update_data = category_in.model_dump(exclude_unset=True)
    for field in ("name", "is_active"):
        if update_data.get(field, ...) is None:
            update_data.pop(field)
    category = crud_category.update(db, db_obj=category, obj_in=update_data)
    logger.info(f"Category updated: {category.slug} by {current_user.username}")
    return success_response(
        {"category": CategoryResponse.model_validate(category)},
        message="Category updated successfully",
    )
