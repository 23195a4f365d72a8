"""Post model and its approval lifecycle.

Status moves along ``draft -> pending -> published | rejected`` and
``published -> archived``. Each transition method checks the current status
itself and raises ``InvalidStatusTransition`` when called from the wrong
state; ``CRUDPost`` calls them on a row it has locked, so the check runs
against the persisted state at write time.
"""

import math
import re
import secrets
import time
from datetime import datetime
from enum import Enum
from typing import Optional

from slugify import slugify
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    Enum as SQLEnum,
    event,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.exceptions import InvalidStatusTransition, ValidationFailed
from ..database import Base

EXCERPT_LENGTH = 150
WORDS_PER_MINUTE = 200
REJECTION_REASON_MIN = 10
REJECTION_REASON_MAX = 500

_DISALLOWED_SLUG_CHARS = re.compile(r"[^\w\s-]")


class PostStatus(str, Enum):
    """Post lifecycle states."""
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


def slugify_title(title: str) -> str:
    """Derive a URL-safe slug from a title.

    Characters other than letters, digits, whitespace and hyphens are dropped
    before whitespace runs are collapsed into single hyphens.
    """
    stripped = _DISALLOWED_SLUG_CHARS.sub("", (title or "").lower())
    return slugify(stripped)


def unique_slug(title: str) -> str:
    """Slug with a timestamp and random suffix appended.

    Uniqueness is still enforced by the unique index on ``posts.slug``.
    """
    base = slugify_title(title) or "post"
    return f"{base[:80]}-{int(time.time() * 1000)}-{secrets.token_hex(2)}"


def make_excerpt(content: str) -> str:
    return (content or "")[:EXCERPT_LENGTH] + "..."


def validate_rejection_reason(reason: Optional[str]) -> str:
    cleaned = (reason or "").strip()
    if not REJECTION_REASON_MIN <= len(cleaned) <= REJECTION_REASON_MAX:
        raise ValidationFailed.for_field(
            "reason",
            f"Rejection reason must be between {REJECTION_REASON_MIN} and "
            f"{REJECTION_REASON_MAX} characters",
        )
    return cleaned


class Post(Base):
    """Blog post."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    author_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Content
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(120), nullable=False, unique=True)
    excerpt = Column(String(300), nullable=True)
    featured_image = Column(String(500), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    seo = Column(JSON, nullable=True)

    # Lifecycle
    status = Column(
        SQLEnum(PostStatus, name="post_status", values_callable=lambda s: [m.value for m in s]),
        nullable=False,
        default=PostStatus.DRAFT,
        index=True,
    )
    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(TIMESTAMP, nullable=True)

    # Approval
    is_approved = Column(Boolean, default=False, nullable=False)
    approved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(TIMESTAMP, nullable=True)
    rejection_reason = Column(String(500), nullable=True)
    submitted_for_approval = Column(Boolean, default=False, nullable=False)
    submitted_at = Column(TIMESTAMP, nullable=True)

    # Counters
    view_count = Column(Integer, default=0, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_post_author_created", "author_id", "created_at"),
        Index("idx_post_category_created", "category_id", "created_at"),
        Index("idx_post_status_published", "status", "is_published"),
        Index("idx_post_approval_queue", "submitted_for_approval", "submitted_at"),
    )

    # Relationships
    author = relationship("User", back_populates="posts", foreign_keys=[author_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    category = relationship("Category", back_populates="posts")
    likes = relationship("PostLike", back_populates="post", cascade="all, delete-orphan")

    # ----- Derived -----
    @property
    def reading_time(self) -> int:
        """Minutes to read at 200 words per minute, rounded up."""
        words = len((self.content or "").split())
        return math.ceil(words / WORDS_PER_MINUTE)

    # ----- Lifecycle -----
    def _require_status(self, expected: PostStatus, message: str) -> None:
        if self.status != expected:
            current = getattr(self.status, "value", self.status)
            raise InvalidStatusTransition(message, current_status=current)

    def submit_for_approval(self, now: Optional[datetime] = None) -> None:
        self._require_status(PostStatus.DRAFT, "Only draft posts can be submitted for approval")
        self.status = PostStatus.PENDING
        self.submitted_for_approval = True
        self.submitted_at = now or datetime.utcnow()

    def approve(self, admin_id: int, now: Optional[datetime] = None) -> None:
        self._require_status(PostStatus.PENDING, "Only pending posts can be approved")
        now = now or datetime.utcnow()
        self.status = PostStatus.PUBLISHED
        self.is_approved = True
        self.approved_by_id = admin_id
        self.approved_at = now
        self.published_at = now
        self.is_published = True
        self.rejection_reason = None

    def reject(self, admin_id: int, reason: str, now: Optional[datetime] = None) -> None:
        reason = validate_rejection_reason(reason)
        self._require_status(PostStatus.PENDING, "Only pending posts can be rejected")
        self.status = PostStatus.REJECTED
        self.is_approved = False
        self.approved_by_id = admin_id
        self.approved_at = now or datetime.utcnow()
        self.rejection_reason = reason

    def archive(self) -> None:
        self._require_status(PostStatus.PUBLISHED, "Only published posts can be archived")
        self.status = PostStatus.ARCHIVED
        self.is_published = False

    def return_to_draft(self) -> None:
        """Move a rejected post back to draft after its author revises it."""
        self._require_status(PostStatus.REJECTED, "Only rejected posts can be revised")
        self.status = PostStatus.DRAFT
        self.submitted_for_approval = False
        self.submitted_at = None
        self.approved_by_id = None
        self.approved_at = None
        self.rejection_reason = None

    def __repr__(self):
        return f"<Post {self.slug} [{self.status}]>"


@event.listens_for(Post, "before_insert")
def _fill_excerpt(mapper, connection, post: Post) -> None:
    if not post.excerpt and post.content:
        post.excerpt = make_excerpt(post.content)
