"""Authentication module."""

from .dependencies import get_current_user, get_registry, require_administrator
from .jwt import create_access_token, verify_token
from .registry import UserRegistry

__all__ = [
    "UserRegistry",
    "get_current_user",
    "get_registry",
    "require_administrator",
    "create_access_token",
    "verify_token",
]
