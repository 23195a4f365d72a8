"""Category model for grouping posts."""

from sqlalchemy import Column, Integer, String, TIMESTAMP, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from slugify import slugify

from ..database import Base


class Category(Base):
    """Post category, optionally nested under a parent category."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    slug = Column(String(60), nullable=False, unique=True, index=True)
    description = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    # Relationships
    parent = relationship("Category", remote_side=[id])
    posts = relationship("Post", back_populates="category")

    @staticmethod
    def slug_for(name: str) -> str:
        return slugify(name)

    def __repr__(self):
        return f"<Category {self.slug}>"
