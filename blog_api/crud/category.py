"""CRUD operations for Category."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from blog_api.crud.base import CRUDBase
from blog_api.models.category import Category
from blog_api.schemas.category import CategoryCreate, CategoryUpdate


class CRUDCategory(CRUDBase[Category, CategoryCreate, CategoryUpdate]):
    def get_active(self, db: Session) -> List[Category]:
        stmt = select(Category).where(Category.is_active == True).order_by(Category.name)  # noqa: E712
        return list(db.scalars(stmt).all())

    def get_by_slug(self, db: Session, slug: str) -> Optional[Category]:
        return self.get_by_field(db, "slug", slug)

    def get_by_name(self, db: Session, name: str) -> Optional[Category]:
        return self.get_by_field(db, "name", name)

    def create_category(self, db: Session, *, category_in: CategoryCreate) -> Category:
        data = category_in.model_dump(exclude_unset=True)
        data["slug"] = category_in.slug or Category.slug_for(category_in.name)
        return self.create(db, obj_in=data)


# Singleton instance
crud_category = CRUDCategory(Category)
