"""CRUD operations for `User` model."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from blog_api.core.permissions import Role
from blog_api.core.security import compare_password, hash_password
from blog_api.crud.base import LIKE_ESCAPE, CRUDBase, contains_pattern
from blog_api.models.post import Post
from blog_api.models.post_like import PostLike
from blog_api.models.user import User
from blog_api.schemas.common import PageParams
from blog_api.schemas.user import UserRegister, UserUpdate

logger = logging.getLogger(__name__)

NEW_USER_WINDOW_DAYS = 30
TOP_USERS_LIMIT = 10


class CRUDUser(CRUDBase[User, UserRegister, UserUpdate]):
    sortable = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "username": "username",
        "email": "email",
        "lastLogin": "last_login",
        "role": "role",
    }

    def get_by_email(self, db: Session, email: Optional[str]) -> Optional[User]:
        if not email:
            return None
        stmt = select(User).where(User.email == email.lower()).limit(1)
        return db.scalars(stmt).first()

    def get_by_username(self, db: Session, username: Optional[str]) -> Optional[User]:
        if not username:
            return None
        stmt = select(User).where(User.username == username.lower()).limit(1)
        return db.scalars(stmt).first()

    def create_user(self, db: Session, *, user_in: UserRegister, role: Role = Role.USER) -> User:
        user_data = user_in.model_dump(exclude_unset=True, exclude={"password", "profile"})
        db_obj = User(
            **user_data,
            password_hash=hash_password(user_in.password),
            role=role,
        )
        if user_in.profile is not None:
            db_obj.apply_profile(user_in.profile.model_dump(exclude_unset=True))

        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, regardless of active state."""
        user = self.get_by_email(db, email)
        if not user:
            return None
        if not compare_password(password, user.password_hash):
            return None
        return user

    def record_login(self, db: Session, *, user: User) -> User:
        user.last_login = datetime.utcnow()
        return self.update(db, db_obj=user, obj_in={})

    def update_profile(self, db: Session, *, user: User, profile: Dict[str, Any]) -> User:
        """Merge profile fields; fields not present in ``profile`` are kept."""
        user.apply_profile(profile)
        return self.update(db, db_obj=user, obj_in={})

    def set_active(self, db: Session, *, user: User, is_active: bool) -> User:
        return self.update(db, db_obj=user, obj_in={"is_active": is_active})

    def list_users(
        self,
        db: Session,
        *,
        params: PageParams,
        role: Optional[Role] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)
        if search:
            pattern = contains_pattern(search)
            stmt = stmt.where(or_(
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
                User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        stmt = self.order_by(stmt, params.sort_by, params.sort_order)
        return self.paginate(db, stmt, page=params.page, limit=params.limit)

    def count_posts(self, db: Session, *, user_id: int) -> int:
        return db.scalar(select(func.count(Post.id)).where(Post.author_id == user_id)) or 0

    def delete_with_posts(self, db: Session, *, user: User) -> int:
        """Delete a user together with their posts and likes.

        Returns the number of posts removed.
        """
        username = user.username
        post_ids = select(Post.id).where(Post.author_id == user.id)
        liked_elsewhere = select(PostLike.post_id).where(
            PostLike.user_id == user.id, PostLike.post_id.not_in(post_ids)
        )
        try:
            # Likes the user left on other authors' posts no longer count
            db.execute(
                update(Post)
                .where(Post.id.in_(liked_elsewhere))
                .values(like_count=Post.like_count - 1)
                .execution_options(synchronize_session=False)
            )
            db.execute(delete(PostLike).where(or_(
                PostLike.user_id == user.id,
                PostLike.post_id.in_(post_ids),
            )))
            removed = db.execute(delete(Post).where(Post.author_id == user.id)).rowcount
            db.delete(user)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"Deleted user {username} and {removed} post(s)")
        return removed

    def get_stats(self, db: Session) -> Dict[str, Any]:
        """Counts for the admin overview."""
        total = db.scalar(select(func.count(User.id))) or 0
        active = db.scalar(select(func.count(User.id)).where(User.is_active == True)) or 0  # noqa: E712
        since = datetime.utcnow() - timedelta(days=NEW_USER_WINDOW_DAYS)
        new_users = db.scalar(select(func.count(User.id)).where(User.created_at >= since)) or 0

        by_role = db.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        ).all()

        post_count = func.count(Post.id).label("post_count")
        top_rows = db.execute(
            select(User.id, User.username, post_count)
            .join(Post, Post.author_id == User.id)
            .group_by(User.id, User.username)
            .order_by(post_count.desc(), User.id)
            .limit(TOP_USERS_LIMIT)
        ).all()

        return {
            "total_users": total,
            "active_users": active,
            "inactive_users": total - active,
            "new_users": new_users,
            "users_by_role": [{"role": role, "count": count} for role, count in by_role],
            "top_users": [
                {"id": user_id, "username": username, "post_count": count}
                for user_id, username, count in top_rows
            ],
        }


# Singleton instance
crud_user = CRUDUser(User)
