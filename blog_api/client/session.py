"""Client-side authentication state."""

import logging
from typing import Any, Dict, Iterable, Optional

from blog_api.core.permissions import Role, RoleSpec, has_role

logger = logging.getLogger(__name__)


class AuthSession:
    """Token and current user held by a client.

    Populated by login/register, or lazily from ``/auth/me`` when only a
    token is known. Cleared by logout or any 401 response.
    """

    def __init__(self, token: Optional[str] = None, user: Optional[Dict[str, Any]] = None):
        self.token = token
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    @property
    def needs_user(self) -> bool:
        """A token is held but the user has not been fetched yet."""
        return bool(self.token) and self.user is None

    def set(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user

    def invalidate(self) -> None:
        if self.token:
            logger.info("Auth session invalidated")
        self.token = None
        self.user = None

    def has_role(self, role: RoleSpec) -> bool:
        return has_role(self.user, role)

    def has_any_role(self, roles: Iterable[Role]) -> bool:
        return has_role(self.user, list(roles))

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    @property
    def is_moderator(self) -> bool:
        return self.has_role(Role.MODERATOR)

    @property
    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}
