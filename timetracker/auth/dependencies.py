"""
Authentication dependencies for FastAPI endpoints.

Provides dependency functions that extract the caller's identity from a
bearer token (``Authorization`` header or ``auth-token`` cookie) and enforce
authentication/authorization requirements.
"""
from typing import Optional
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from uuid import UUID

from ..database.models import UserRole
from .jwt_handler import JWTHandler

AUTH_COOKIE_NAME = "auth-token"

security = HTTPBearer(auto_error=False)


class CurrentUser:
    """Current user information from JWT token."""

    def __init__(self, user_id: UUID, email: Optional[str], role: str):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.is_admin = role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<CurrentUser(user_id={self.user_id}, role={self.role})>"


def user_from_token(token: Optional[str]) -> Optional[CurrentUser]:
    """
    Decode an access token into a CurrentUser.

    Returns None when the token is missing, fails verification, has expired,
    is not an access token or lacks the identity claims.
    """
    if not token:
        return None

    payload = JWTHandler.verify_token(token)
    if payload is None or payload.get("type") != "access":
        return None

    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role not in (UserRole.ADMIN.value, UserRole.USER.value):
        return None

    try:
        return CurrentUser(user_id=UUID(user_id), email=payload.get("email"), role=role)
    except ValueError:
        return None


# PUBLIC_INTERFACE
async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_token: Optional[str] = Cookie(None, alias=AUTH_COOKIE_NAME),
) -> CurrentUser:
    """
    Get current authenticated user from the bearer token.

    The Authorization header takes precedence over the cookie.

    Raises:
        HTTPException: 401 if the credential is missing or invalid
    """
    token = credentials.credentials if credentials else auth_token
    current_user = user_from_token(token)
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


# PUBLIC_INTERFACE
async def require_admin(
    current_user: CurrentUser = Depends(require_auth)
) -> CurrentUser:
    """
    Get current user and ensure they have admin role.

    Raises:
        HTTPException: 403 if user is not admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
