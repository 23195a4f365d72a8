from .api import ApiClientError, BlogClient
from .session import AuthSession

__all__ = ["ApiClientError", "AuthSession", "BlogClient"]
