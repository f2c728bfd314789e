"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storage.authors import Role, User

from .registry import UserRegistry
from .jwt import verify_token

# auto_error=False so a missing token gets our own 401 message
bearer_scheme = HTTPBearer(auto_error=False)


def get_registry(request: Request) -> UserRegistry:
    """The process-wide user registry, set up in main.py."""
    return request.app.state.registry


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    registry: UserRegistry = Depends(get_registry),
) -> User:
    """
    Get the registered user named by the bearer token.

    Returns:
        User (a copy taken from the registry)

    Raises:
        HTTPException: If not authenticated, unknown, or not yet approved
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Provide a Bearer token.",
        )

    token_data = verify_token(credentials.credentials)
    user = registry.lookup(token_data.email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User {user.email} is awaiting approval",
        )

    return user


async def require_administrator(user: User = Depends(get_current_user)) -> User:
    """Require the current user to hold the Administrator role."""
    if not user.has_role(Role.ADMINISTRATOR):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unauthorised: User is not '{Role.ADMINISTRATOR.value}'",
        )
    return user
