"""Create tables and seed default data.

Run with ``python -m blog_api.init_db``.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

import blog_api.models  # noqa: F401  registers every model on Base.metadata
from blog_api.config import settings
from blog_api.core.log_config import configure_logging
from blog_api.core.permissions import Role
from blog_api.core.security import hash_password
from blog_api.database import Base, SessionLocal, engine
from blog_api.models.category import Category
from blog_api.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Technology", "Tech related posts"),
    ("Science", "Science related posts"),
    ("Health", "Health related posts"),
    ("Business", "Business related posts"),
    ("Lifestyle", "Lifestyle related posts"),
)


def create_tables() -> None:
    Base.metadata.create_all(bind=engine)


def seed_categories(db: Session) -> int:
    """Insert missing default categories. Returns how many were added."""
    existing = set(db.scalars(select(Category.name)).all())
    added = 0
    for name, description in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        db.add(Category(name=name, slug=Category.slug_for(name), description=description))
        added += 1
    db.commit()
    return added


def seed_user(db: Session, *, username: str, email: str, password: str, role: Role) -> User:
    """Create a user unless the email is already registered."""
    user = db.scalars(select(User).where(User.email == email.lower()).limit(1)).first()
    if user:
        return user
    user = User(
        username=username.lower(),
        email=email.lower(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def main() -> None:
    configure_logging()
    create_tables()
    logger.info("Tables created")

    db = SessionLocal()
    try:
        added = seed_categories(db)
        logger.info(f"Seeded {added} categories")

        if settings.ADMIN_PASSWORD:
            admin = seed_user(
                db,
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
                role=Role.ADMIN,
            )
            logger.info(f"Admin account ready: {admin.username}")
        else:
            logger.warning("ADMIN_PASSWORD not set; skipping admin account")
    finally:
        db.close()


if __name__ == "__main__":
    main()
