"""Generic CRUD base class for SQLAlchemy models."""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.orm import Session

from blog_api.database import Base


ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

LIKE_ESCAPE = "\\"


def contains_pattern(value: str) -> str:
    """Build a LIKE pattern matching ``value`` literally anywhere in a column."""
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Reusable CRUD helper for SQLAlchemy models.

    All methods operate on model instances and return database objects, not schemas.
    Subclasses list the columns a client may sort by in ``sortable``, keyed by
    the camelCase name used on the wire.
    """

    sortable: Mapping[str, str] = {"createdAt": "created_at"}
    default_sort: str = "createdAt"

    def __init__(self, model: Type[ModelType]):
        self.model = model

    # ----- Read -----
    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """Get one record by primary key."""
        return db.get(self.model, id)

    def get_by_field(self, db: Session, field_name: str, value: Any) -> Optional[ModelType]:
        """Get first record where given field equals value."""
        if not hasattr(self.model, field_name):
            raise AttributeError(f"Model '{self.model.__name__}' has no field '{field_name}'")
        stmt = select(self.model).where(getattr(self.model, field_name) == value).limit(1)
        return db.scalars(stmt).first()

    def order_by(self, stmt: Select, sort_by: Optional[str], sort_order: str = "desc") -> Select:
        """Apply a whitelisted sort; unknown fields fall back to ``default_sort``."""
        column_name = self.sortable.get(sort_by or self.default_sort) or self.sortable[self.default_sort]
        column = getattr(self.model, column_name)
        direction = asc if sort_order == "asc" else desc
        # Tie-break on id so pages stay stable when the sort key repeats
        return stmt.order_by(direction(column), direction(self.model.id))

    def paginate(
        self,
        db: Session,
        stmt: Select,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ModelType], int]:
        """Run ``stmt`` for one page and return ``(items, total)``."""
        total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
        items = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
        return list(items), total

    # ----- Create -----
    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """Create a new record from a Pydantic schema or dict."""
        obj_in_data: Dict[str, Any] = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)
        db_obj = self.model(**obj_in_data)  # type: ignore[arg-type]
        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj

    # ----- Update -----
    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
    ) -> ModelType:
        """Update a record with fields from a Pydantic schema or dict."""
        update_data = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj

    # ----- Delete -----
    def delete(self, db: Session, *, id: Any) -> Optional[ModelType]:
        """Hard-delete a record. Returns the deleted object, or None if not found."""
        db_obj = self.get(db, id)
        if not db_obj:
            return None

        try:
            db.delete(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return db_obj
