"""Single translation point from exceptions to the error envelope."""

import logging
import re
import traceback
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api.config import settings
from blog_api.core.exceptions import ConflictError, InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

# Matches both SQLite ("UNIQUE constraint failed: posts.slug") and
# PostgreSQL ("Key (slug)=(...) already exists") duplicate-key messages.
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=")


def duplicate_field(exc: IntegrityError) -> Optional[str]:
    """Return the column name a duplicate-key error refers to, if any."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in (_SQLITE_UNIQUE, _POSTGRES_UNIQUE):
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[List[Any]] = None,
    exc: Optional[BaseException] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    error = {"message": message, "statusCode": status_code}
    if details:
        error["details"] = details
    if exc is not None and not settings.is_production:
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    body = {
        "success": False,
        "error": error,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _validation_details(exc: RequestValidationError) -> List[dict]:
    details = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = err.get("msg", "Invalid value")
        ctx_error = (err.get("ctx") or {}).get("error")
        if ctx_error is not None:
            message = str(ctx_error)
        details.append({"field": ".".join(loc) or None, "message": message})
    return details


def setup_error_handling(app: FastAPI) -> None:
    """Register exception handlers that emit the standard error envelope."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {exc.status_code}: {exc.detail}")
        else:
            logger.info(f"{request.method} {request.url.path} - {exc.status_code}: {exc.detail}")

        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        return error_response(
            request,
            exc.status_code,
            message,
            details=getattr(exc, "details", None),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        logger.info(f"{request.method} {request.url.path} - validation failed: {details}")
        return error_response(request, status.HTTP_400_BAD_REQUEST, "Validation failed", details)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        field = duplicate_field(exc)
        logger.warning(f"{request.method} {request.url.path} - integrity error on {field}")
        message = ConflictError(field).detail if field else "Duplicate or invalid reference"
        return error_response(request, status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(InvalidTokenError)
    async def token_error_handler(request: Request, exc: InvalidTokenError):
        message = "Token expired" if isinstance(exc, TokenExpiredError) else "Invalid token"
        return error_response(
            request,
            status.HTTP_401_UNAUTHORIZED,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        client = request.client.host if request.client else "N/A"
        logger.error(
            f"Unhandled error on {request.method} {request.url.path} from {client}: {exc}",
            exc_info=exc,
        )
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            exc=exc,
        )


__all__ = ["setup_error_handling", "error_response", "duplicate_field"]
