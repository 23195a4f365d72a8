"""Custom exceptions for the blog API.

HTTP-facing errors subclass ``HTTPException`` so FastAPI can raise them from
anywhere in a request; ``setup_error_handling`` turns every one of them into
the standard error envelope. Credential errors are plain exceptions raised by
``blog_api.core.security`` and are translated at the same place.
"""

from typing import Any, List, Optional

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base exception for errors that map onto an HTTP status."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        details: Optional[List[Any]] = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.details = details


class BadRequestError(ApiError):
    def __init__(self, detail: str = "Bad request", details: Optional[List[Any]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, details)


class ValidationFailed(BadRequestError):
    """Field-level validation failure.

    ``details`` is a list of ``{"field": ..., "message": ...}`` items.
    """

    def __init__(self, details: List[Any], detail: str = "Validation failed"):
        super().__init__(detail=detail, details=details)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(details=[{"field": field, "message": message}])


class ConflictError(BadRequestError):
    """A unique field already holds the submitted value."""

    def __init__(self, field: str):
        super().__init__(detail=f"{field[:1].upper()}{field[1:]} already exists")
        self.field = field


class InvalidStatusTransition(BadRequestError):
    """A lifecycle operation was invoked from a state that does not allow it."""

    def __init__(self, detail: str, current_status: Optional[str] = None):
        super().__init__(detail=detail)
        self.current_status = current_status


class AuthenticationError(ApiError):
    def __init__(self, detail: str = "Access denied. No token provided."):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(ApiError):
    def __init__(self, detail: str = "Access denied. Insufficient permissions."):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class NotFoundError(ApiError):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class RateLimitExceeded(ApiError):
    def __init__(self, retry_after: int = 0):
        super().__init__(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests, please try again later",
            headers={"Retry-After": str(retry_after)},
        )


class CredentialError(Exception):
    """Base class for password and token utility failures."""


class HashingError(CredentialError):
    pass


class ComparisonError(CredentialError):
    pass


class TokenGenerationError(CredentialError):
    pass


class InvalidTokenError(CredentialError):
    pass


class TokenExpiredError(InvalidTokenError):
    pass


__all__ = [
    "ApiError",
    "BadRequestError",
    "ValidationFailed",
    "ConflictError",
    "InvalidStatusTransition",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "RateLimitExceeded",
    "CredentialError",
    "HashingError",
    "ComparisonError",
    "TokenGenerationError",
    "InvalidTokenError",
    "TokenExpiredError",
]
