"""Roles and the role predicate shared by dependencies and route handlers."""

import logging
from enum import Enum
from typing import Any, FrozenSet, Iterable, Union

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """User roles."""
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


RoleSpec = Union[Role, str, Iterable[Union[Role, str]]]


def _as_role(value: Union[Role, str]) -> Role:
    # Raises ValueError for unknown role names
    return value if isinstance(value, Role) else Role(value)


def normalize_roles(required_roles: RoleSpec) -> FrozenSet[Role]:
    """Turn a single role or an iterable of roles into a set of ``Role``."""
    if isinstance(required_roles, (Role, str)):
        return frozenset({_as_role(required_roles)})
    return frozenset(_as_role(role) for role in required_roles)


def _principal_role(principal: Any):
    if isinstance(principal, dict):
        return principal.get("role")
    return getattr(principal, "role", None)


def has_role(principal: Any, required_roles: RoleSpec) -> bool:
    """Return True if ``principal`` holds one of ``required_roles``.

    ``principal`` may be a model instance or a token-claims mapping. A missing
    principal or a principal without a role is never authorized.
    """
    roles = normalize_roles(required_roles)
    if not principal:
        return False

    role = _principal_role(principal)
    if not role:
        return False

    try:
        role = _as_role(role)
    except ValueError:
        logger.warning(f"Unknown role on principal: {role!r}")
        return False

    allowed = role in roles
    logger.debug(f"Role check: {role.value} in {sorted(r.value for r in roles)} = {allowed}")
    return allowed


def is_admin(principal: Any) -> bool:
    return has_role(principal, Role.ADMIN)


__all__ = ["Role", "RoleSpec", "has_role", "is_admin", "normalize_roles"]
