"""
Authentication-related Pydantic schemas.

Defines request/response models for registration, login and the
current-user lookup.
"""
from pydantic import EmailStr, Field, field_validator

from .base import CamelModel
from .user import UserResponse
from ..auth.jwt_handler import MIN_PASSWORD_LENGTH


class UserRegistrationRequest(CamelModel):
    """User registration request schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="User password (minimum 8 characters)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class UserLoginRequest(CamelModel):
    """User login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class AuthResponse(CamelModel):
    """Authentication response schema."""
    token: str = Field(..., description="JWT access token")
    user: UserResponse = Field(..., description="Authenticated user")


class CurrentUserResponse(CamelModel):
    """Current user response schema."""
    user: UserResponse = Field(..., description="Authenticated user")


class StandardResponse(CamelModel):
    """Standard API response schema."""
    message: str = Field(..., description="Response message")
