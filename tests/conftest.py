"""
Pytest configuration and fixtures
In-memory SQLite database, FastAPI TestClient and user/post factories
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient

import blog_api.models  # noqa: F401
from blog_api.core import rate_limiter
from blog_api.core.permissions import Role
from blog_api.core.security import generate_token, hash_password
from blog_api.database import Base, SessionLocal, engine
from blog_api.main import app
from blog_api.models.category import Category
from blog_api.models.post import Post, PostStatus
from blog_api.models.user import User

DEFAULT_PASSWORD = "Passw0rd!"


# === DATABASE ISOLATION ===

@pytest.fixture(autouse=True)
def reset_state():
    """Fresh schema and rate limiter for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    rate_limiter.get_rate_limiter().reset()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# === FACTORIES ===

@pytest.fixture
def make_user(db) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(
        username: Optional[str] = None,
        role: Role = Role.USER,
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def author(make_user) -> User:
    return make_user("author")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("other")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin", role=Role.ADMIN)


@pytest.fixture
def category(db) -> Category:
    category = Category(name="Technology", slug="technology", description="Tech related posts")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_post(db, category) -> Callable[..., Post]:
    counter = {"n": 0}

    def _make_post(
        author: User,
        status: PostStatus = PostStatus.DRAFT,
        title: Optional[str] = None,
        content: str = "Some meaningful content for the post body.",
        **fields,
    ) -> Post:
        counter["n"] += 1
        title = title or f"Post number {counter['n']}"
        fields.setdefault("category_id", category.id)
        post = Post(
            title=title,
            content=content,
            slug=f"post-number-{counter['n']}",
            author_id=author.id,
            status=status,
            is_published=status == PostStatus.PUBLISHED,
            **fields,
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make_post


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {generate_token(user)}"}


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers
