"""In-memory rate limiter for authentication requests."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class InMemoryRateLimiter:
    """Sliding-window rate limiter keyed by client address."""

    def __init__(self, max_requests: int = 20, window_seconds: int = 60):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in window
            window_seconds: Time window in seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, List[datetime]] = {}  # key -> list of timestamps
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> Tuple[bool, int]:
        """
        Check whether ``key`` may make another request and record it if so.

        Returns:
            tuple: (is_allowed, seconds_until_reset)
        """
        async with self._lock:
            now = datetime.utcnow()
            cutoff_time = now - timedelta(seconds=self.window_seconds)

            # Remove old requests outside the window
            key_requests = self._requests.setdefault(key, [])
            key_requests[:] = [req_time for req_time in key_requests if req_time > cutoff_time]

            if len(key_requests) < self.max_requests:
                key_requests.append(now)
                return (True, 0)

            oldest_request = min(key_requests)
            seconds_until_reset = int(
                (oldest_request + timedelta(seconds=self.window_seconds) - now).total_seconds()
            )
            logger.warning(f"Rate limit exceeded for {key}")
            return (False, max(0, seconds_until_reset))

    def reset(self) -> None:
        self._requests.clear()


# Singleton instance - will be initialized with settings
rate_limiter: Optional[InMemoryRateLimiter] = None


def get_rate_limiter() -> InMemoryRateLimiter:
    """Get or create rate limiter instance with settings."""
    global rate_limiter
    if rate_limiter is None:
        from blog_api.config import settings
        rate_limiter = InMemoryRateLimiter(
            max_requests=settings.AUTH_RATE_LIMIT_PER_MINUTE,
            window_seconds=60
        )
    return rate_limiter
