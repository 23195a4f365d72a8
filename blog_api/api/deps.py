"""FastAPI dependency injection functions for authentication and database access."""

import logging
from typing import Callable, Generator, Optional

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from blog_api.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    PermissionDeniedError,
    RateLimitExceeded,
    TokenExpiredError,
)
from blog_api.core.log_config import log_security
from blog_api.core.permissions import Role, has_role, normalize_roles
from blog_api.core.rate_limiter import get_rate_limiter
from blog_api.core.security import verify_token
from blog_api.crud import crud_user
from blog_api.database import SessionLocal
from blog_api.models.user import User
from blog_api.schemas.common import PageParams

logger = logging.getLogger(__name__)

# OAuth2 Bearer token scheme; missing tokens are reported by get_current_user
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _user_from_token(db: Session, token: str) -> Optional[User]:
    """Resolve an active user from an access token, or None."""
    payload = verify_token(token)
    if payload.get("type") == "refresh" or payload.get("id") is None:
        return None
    user = crud_user.get(db, payload["id"])
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency to get the current authenticated, active user.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or the user
            no longer exists or is deactivated
    """
    if not token:
        raise AuthenticationError("Access denied. No token provided.")

    try:
        user = _user_from_token(db, token)
    except TokenExpiredError:
        raise AuthenticationError("Token expired")
    except InvalidTokenError:
        user = None

    if user is None:
        logger.info("[AUTH] Token did not resolve to an active user")
        raise AuthenticationError("Invalid token. User not found.")

    logger.debug(f"[AUTH] User authenticated: id={user.id}, role={user.role.value}")
    return user


def require_role(*allowed_roles: Role) -> Callable:
    """
    Factory function to create role-based access control dependency.

    Example:
        @router.get("/pending/approval")
        async def pending(current_user: User = Depends(require_role(Role.ADMIN))):
            ...
    """
    # Fail at import time on a misspelled role
    roles = normalize_roles(allowed_roles)

    async def role_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not has_role(current_user, roles):
            log_security(
                "Forbidden",
                user=current_user.username,
                path=request.url.path,
                required=sorted(r.value for r in roles),
            )
            raise PermissionDeniedError("Access denied. Insufficient permissions.")
        return current_user

    return role_checker


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
) -> PageParams:
    """Pagination and sorting query parameters shared by list endpoints."""
    return PageParams(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


async def auth_rate_limit(request: Request) -> None:
    """Limit credential endpoints per client address."""
    client = request.client.host if request.client else "unknown"
    allowed, retry_after = await get_rate_limiter().hit(client)
    if not allowed:
        log_security("Rate limit exceeded", client=client, path=request.url.path)
        raise RateLimitExceeded(retry_after)


__all__ = [
    "oauth2_scheme",
    "get_db",
    "get_current_user",
    "require_role",
    "page_params",
    "auth_rate_limit",
]
