"""CRUD operations for PostLike."""

import logging
from typing import Optional, Tuple

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from blog_api.crud.base import CRUDBase
from blog_api.models.post import Post
from blog_api.models.post_like import PostLike

logger = logging.getLogger(__name__)


class CRUDPostLike(CRUDBase[PostLike, dict, dict]):
    """CRUD operations for PostLike."""

    def get_like(
        self,
        db: Session,
        *,
        post_id: int,
        user_id: int,
    ) -> Optional[PostLike]:
        """Get like record if exists."""
        stmt = select(PostLike).where(
            and_(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
            )
        )
        return db.scalars(stmt).first()

    def toggle_like(
        self,
        db: Session,
        *,
        post: Post,
        user_id: int,
    ) -> Tuple[bool, int]:
        """
        Toggle a user's like on a post.

        Returns:
            (is_liked: bool, new_like_count: int)
        """
        existing_like = self.get_like(db, post_id=post.id, user_id=user_id)

        if existing_like:
            db.delete(existing_like)
            post.like_count = max(0, post.like_count - 1)
            is_liked = False
        else:
            db.add(PostLike(post_id=post.id, user_id=user_id))
            post.like_count = post.like_count + 1
            is_liked = True

        try:
            db.add(post)
            db.commit()
            db.refresh(post)
        except Exception:
            db.rollback()
            raise

        logger.debug(f"Post {post.id} {'liked' if is_liked else 'unliked'} by user {user_id}")
        return is_liked, post.like_count


# Singleton instance
crud_post_like = CRUDPostLike(PostLike)
