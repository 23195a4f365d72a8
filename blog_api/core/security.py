"""Security utilities for JWT authentication and password hashing."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from blog_api.config import settings
from blog_api.core.exceptions import (
    ComparisonError,
    HashingError,
    InvalidTokenError,
    TokenExpiredError,
    TokenGenerationError,
)

logger = logging.getLogger(__name__)

# Password hashing context - PBKDF2 (primary), bcrypt accepted for legacy hashes
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

SPECIAL_CHARACTERS = "@$!%*?&"

PASSWORD_RULES = (
    (lambda p: len(p) >= 8, "Password must be at least 8 characters long"),
    (lambda p: re.search(r"[a-z]", p), "Password must contain at least one lowercase letter"),
    (lambda p: re.search(r"[A-Z]", p), "Password must contain at least one uppercase letter"),
    (lambda p: re.search(r"\d", p), "Password must contain at least one number"),
    (
        lambda p: any(c in SPECIAL_CHARACTERS for c in p),
        f"Password must contain at least one special character ({SPECIAL_CHARACTERS})",
    ),
)


@dataclass
class PasswordStrength:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    if not isinstance(password, str):
        raise HashingError("Failed to hash password")
    try:
        hashed = pwd_context.hash(password)
    except (TypeError, ValueError) as e:
        logger.error(f"Error hashing password: {e}")
        raise HashingError("Failed to hash password") from e
    logger.debug("Password hashed successfully")
    return hashed


def compare_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored hash.

    Raises:
        ComparisonError: If either input is missing or the hash is malformed
    """
    if not isinstance(plain_password, str) or not isinstance(hashed_password, str):
        raise ComparisonError("Failed to compare passwords")
    try:
        is_match = pwd_context.verify(plain_password, hashed_password)
    except (TypeError, ValueError) as e:
        logger.error(f"Error comparing passwords: {e}")
        raise ComparisonError("Failed to compare passwords") from e
    logger.debug(f"Password comparison result: {is_match}")
    return is_match


def _claim(principal: Any, name: str) -> Any:
    if isinstance(principal, dict):
        return principal.get(name)
    return getattr(principal, name, None)


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({
        "iat": now,
        "exp": now + expires_delta,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def generate_token(principal: Any, expires_delta: Optional[timedelta] = None) -> str:
    """Create an access token for a user (model instance or mapping).

    Args:
        principal: Object exposing id, username, email and role
        expires_delta: Custom lifetime. If None, uses JWT_EXPIRES_IN_DAYS

    Returns:
        Encoded JWT token

    Raises:
        TokenGenerationError: If the principal is missing or has no id
    """
    if not principal or _claim(principal, "id") is None:
        logger.error("Error generating token: principal is missing")
        raise TokenGenerationError("Failed to generate authentication token")

    role = _claim(principal, "role")
    claims = {
        "sub": str(_claim(principal, "id")),
        "id": _claim(principal, "id"),
        "username": _claim(principal, "username"),
        "email": _claim(principal, "email"),
        "role": getattr(role, "value", role),
    }
    try:
        token = _encode(claims, expires_delta or timedelta(days=settings.JWT_EXPIRES_IN_DAYS))
    except JWTError as e:
        logger.error(f"Error generating token: {e}")
        raise TokenGenerationError("Failed to generate authentication token") from e

    logger.debug(f"Token generated for user: {claims['username']}")
    return token


def generate_refresh_token(principal: Any) -> str:
    """Create a long-lived refresh token carrying only the user id."""
    if not principal or _claim(principal, "id") is None:
        raise TokenGenerationError("Failed to generate refresh token")

    claims = {
        "sub": str(_claim(principal, "id")),
        "id": _claim(principal, "id"),
        "type": "refresh",
    }
    return _encode(claims, timedelta(days=settings.JWT_REFRESH_EXPIRES_IN_DAYS))


def verify_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT token.

    Raises:
        TokenExpiredError: If the token is well-formed but expired
        InvalidTokenError: For any other signature or claim failure
    """
    if not token:
        raise InvalidTokenError("Invalid or expired token")
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError as e:
        logger.warning("Token verification failed: token expired")
        raise TokenExpiredError("Token expired") from e
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise InvalidTokenError("Invalid or expired token") from e

    logger.debug(f"Token verified for user: {payload.get('username')}")
    return payload


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a ``Bearer <token>`` header value, or None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


def validate_password_strength(password: Optional[str]) -> PasswordStrength:
    """Check a password against every strength rule.

    All failing rules are reported, not just the first one.
    """
    candidate = password if isinstance(password, str) else ""
    errors = [message for check, message in PASSWORD_RULES if not check(candidate)]
    is_valid = not errors
    logger.debug(f"Password strength validation: {'valid' if is_valid else 'invalid'}")
    return PasswordStrength(is_valid=is_valid, errors=errors)


__all__ = [
    "PasswordStrength",
    "hash_password",
    "compare_password",
    "generate_token",
    "generate_refresh_token",
    "verify_token",
    "extract_token_from_header",
    "validate_password_strength",
]
