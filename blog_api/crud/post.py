"""CRUD operations for Post, including the guarded lifecycle writes."""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import String, cast, or_, select, update
from sqlalchemy.orm import Session, selectinload

from blog_api.crud.base import LIKE_ESCAPE, CRUDBase, contains_pattern
from blog_api.models.post import Post, PostStatus, unique_slug
from blog_api.schemas.common import PageParams
from blog_api.schemas.post import PostCreate, PostUpdate

logger = logging.getLogger(__name__)

# Columns that may not be cleared through a partial update
_REQUIRED_FIELDS = ("title", "content", "category_id")


class CRUDPost(CRUDBase[Post, PostCreate, PostUpdate]):
    """CRUD operations for Post."""

    sortable = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "publishedAt": "published_at",
        "submittedAt": "submitted_at",
        "title": "title",
        "viewCount": "view_count",
        "likeCount": "like_count",
    }

    def _with_relations(self, stmt):
        return stmt.options(selectinload(Post.author), selectinload(Post.category))

    # ----- Read -----
    def get_by_slug(self, db: Session, slug: str) -> Optional[Post]:
        return self.get_by_field(db, "slug", slug)

    def list_posts(
        self,
        db: Session,
        *,
        params: PageParams,
        status: Optional[PostStatus] = None,
        category_id: Optional[int] = None,
        author_id: Optional[int] = None,
        search: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[List[Post], int]:
        """Filtered, sorted page of posts. All filters are AND-combined."""
        stmt = select(Post)
        if status is not None:
            stmt = stmt.where(Post.status == status)
        if category_id is not None:
            stmt = stmt.where(Post.category_id == category_id)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        if search:
            pattern = contains_pattern(search)
            stmt = stmt.where(or_(
                Post.title.ilike(pattern, escape=LIKE_ESCAPE),
                Post.content.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if tag:
            # tags is a JSON array; match the quoted element in its text form
            tag_pattern = contains_pattern(f'"{tag}"')
            stmt = stmt.where(cast(Post.tags, String).like(tag_pattern, escape=LIKE_ESCAPE))

        stmt = self.order_by(self._with_relations(stmt), params.sort_by, params.sort_order)
        return self.paginate(db, stmt, page=params.page, limit=params.limit)

    def get_pending(self, db: Session, *, params: PageParams) -> Tuple[List[Post], int]:
        """Approval queue, newest submission first unless another sort is given."""
        if not params.sort_by:
            params = params.model_copy(update={"sort_by": "submittedAt"})
        return self.list_posts(db, params=params, status=PostStatus.PENDING)

    def increment_view_count(self, db: Session, *, post: Post) -> Post:
        db.execute(
            update(Post)
            .where(Post.id == post.id)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(post)
        return post

    # ----- Write -----
    def create_post(self, db: Session, *, post_in: PostCreate, author_id: int) -> Post:
        """Create a draft post. The slug is derived from the title when omitted."""
        data = post_in.model_dump(exclude_unset=True, exclude={"slug", "seo"})
        post = Post(
            **data,
            slug=post_in.slug or unique_slug(post_in.title),
            seo=post_in.seo.model_dump() if post_in.seo else None,
            author_id=author_id,
            status=PostStatus.DRAFT,
        )
        try:
            db.add(post)
            db.commit()
            db.refresh(post)
        except Exception:
            db.rollback()
            raise
        logger.info(f"Post created: {post.slug} by user {author_id}")
        return post

    def update_post(
        self,
        db: Session,
        *,
        post: Post,
        post_in: PostUpdate,
        revised_by_author: bool = False,
    ) -> Post:
        """Apply a partial update.

        A rejected post edited by its author goes back to draft so it can be
        submitted again.
        """
        update_data: Dict[str, Any] = post_in.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if update_data.get(field, ...) is None:
                update_data.pop(field)
        if "seo" in update_data and post_in.seo is not None:
            update_data["seo"] = post_in.seo.model_dump()

        if revised_by_author and post.status == PostStatus.REJECTED:
            post.return_to_draft()
        return self.update(db, db_obj=post, obj_in=update_data)

    # ----- Lifecycle -----
    def _transition(
        self,
        db: Session,
        *,
        post_id: int,
        expected: PostStatus,
        apply: Callable[[Post], None],
    ) -> Optional[Post]:
        """Lock the row in its expected state and apply a lifecycle method.

        If the row is no longer in ``expected`` the method is still called on
        the fresh row, so it raises ``InvalidStatusTransition`` with the real
        current status. Returns None when the post does not exist.
        """
        stmt = (
            select(Post)
            .where(Post.id == post_id, Post.status == expected)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        post = db.scalars(stmt).first()
        if post is None:
            post = db.get(Post, post_id, populate_existing=True)
            if post is None:
                return None

        try:
            apply(post)
            db.add(post)
            db.commit()
            db.refresh(post)
        except Exception:
            db.rollback()
            raise
        return post

    def submit(self, db: Session, *, post_id: int) -> Optional[Post]:
        return self._transition(
            db, post_id=post_id, expected=PostStatus.DRAFT,
            apply=lambda post: post.submit_for_approval(),
        )

    def approve(self, db: Session, *, post_id: int, admin_id: int) -> Optional[Post]:
        return self._transition(
            db, post_id=post_id, expected=PostStatus.PENDING,
            apply=lambda post: post.approve(admin_id),
        )

    def reject(self, db: Session, *, post_id: int, admin_id: int, reason: str) -> Optional[Post]:
        return self._transition(
            db, post_id=post_id, expected=PostStatus.PENDING,
            apply=lambda post: post.reject(admin_id, reason),
        )

    def archive(self, db: Session, *, post_id: int) -> Optional[Post]:
        return self._transition(
            db, post_id=post_id, expected=PostStatus.PUBLISHED,
            apply=lambda post: post.archive(),
        )


# Singleton instance
crud_post = CRUDPost(Post)
