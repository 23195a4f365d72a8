"""Logging setup and request/performance logging middleware."""

import logging
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request

from blog_api.config import settings

logger = logging.getLogger("blog_api.requests")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _default_level() -> str:
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return "WARNING" if settings.is_production else "DEBUG" if settings.DEBUG else "INFO"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(level=level or _default_level(), format=LOG_FORMAT)
    # SQL echo is controlled by DEBUG on the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # passlib complains about bcrypt version metadata on import
    logging.getLogger("passlib").setLevel(logging.ERROR)


def log_performance(operation: str, duration_ms: float, details: Optional[Dict[str, Any]] = None) -> None:
    suffix = f" - {details}" if details else ""
    logger.warning(f"Performance: {operation} took {duration_ms:.0f}ms{suffix}")


def log_security(event: str, **details: Any) -> None:
    suffix = f" - {details}" if details else ""
    logging.getLogger("blog_api.security").warning(f"Security: {event}{suffix}")


def setup_request_logging(app: FastAPI) -> None:
    """Log every request, flag slow ones and expose X-Response-Time."""

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Response-Time"] = f"{duration_ms:.0f}ms"
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {duration_ms:.0f}ms"
        )
        if duration_ms > settings.SLOW_REQUEST_MS:
            log_performance(
                "Slow Request",
                duration_ms,
                {"url": request.url.path, "method": request.method, "statusCode": response.status_code},
            )
        return response


__all__ = ["configure_logging", "setup_request_logging", "log_performance", "log_security"]
