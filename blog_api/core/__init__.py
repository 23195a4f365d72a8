"""Core module exports."""

from .permissions import Role, has_role
from .security import (
    compare_password,
    extract_token_from_header,
    generate_refresh_token,
    generate_token,
    hash_password,
    validate_password_strength,
    verify_token,
)

__all__ = [
    "Role",
    "has_role",
    "compare_password",
    "extract_token_from_header",
    "generate_refresh_token",
    "generate_token",
    "hash_password",
    "validate_password_strength",
    "verify_token",
]
