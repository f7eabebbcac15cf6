"""
Authentication API routes.

Provides endpoints for user registration, login, logout and the current
user lookup. Login and registration also set the ``auth-token`` cookie so
browser clients can authenticate without handling the token themselves.
"""
import os
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...database.models import User
from ...schemas.auth import (
    UserRegistrationRequest, UserLoginRequest, AuthResponse,
    CurrentUserResponse, StandardResponse
)
from ...schemas.user import UserResponse
from ...auth.dependencies import AUTH_COOKIE_NAME, require_auth, CurrentUser
from ...auth.jwt_handler import JWTHandler, ACCESS_TOKEN_EXPIRE_MINUTES
from ...services.users import UserService

AUTH_COOKIE_SECURE = os.getenv("AUTH_COOKIE_SECURE", "false").lower() == "true"

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(response: Response, user: User) -> AuthResponse:
    token = JWTHandler.create_user_token(user.id, user.email, user.role.value)
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


# PUBLIC_INTERFACE
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED,
            summary="Register new user",
            description="Create a user account. The first account created becomes the administrator.")
async def register_user(
    request: UserRegistrationRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Register a new user and sign them in.
    """
    user = UserService(db).register_user(request.name, request.email, request.password)
    return _issue_token(response, user)


# PUBLIC_INTERFACE
@router.post("/login", response_model=AuthResponse,
            summary="User login",
            description="Authenticate with email and password, returning an access token.")
async def login_user(
    request: UserLoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return an access token.
    """
    user = UserService(db).authenticate(request.email, request.password)
    return _issue_token(response, user)


# PUBLIC_INTERFACE
@router.post("/logout", response_model=StandardResponse,
            summary="User logout",
            description="Clear the authentication cookie.")
async def logout_user(response: Response):
    """
    Logout current user.

    Tokens are stateless, so this only clears the cookie.
    """
    response.delete_cookie(AUTH_COOKIE_NAME)
    return StandardResponse(message="Logged out successfully")


# PUBLIC_INTERFACE
@router.get("/me", response_model=CurrentUserResponse,
           summary="Get current user",
           description="Get information about the currently authenticated user.")
async def get_current_user_info(
    current_user: CurrentUser = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Get current authenticated user information.
    """
    user = UserService(db).get_user(current_user.user_id)
    return CurrentUserResponse(user=UserResponse.model_validate(user))
