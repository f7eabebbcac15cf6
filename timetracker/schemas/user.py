"""
User-related Pydantic schemas.

Defines the public views of a user: the short reference embedded in other
resources and the full listing entry shown to administrators.
"""
from typing import List
from pydantic import Field
from uuid import UUID

from ..database.models import UserRole
from .base import CamelModel, UtcDateTime


class UserReference(CamelModel):
    """User fields embedded in time entries, memberships and reports."""
    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="User email address")


class UserResponse(UserReference):
    """User response schema."""
    role: UserRole = Field(..., description="User role")
    created_at: UtcDateTime = Field(..., description="Creation timestamp")


class UsersListResponse(CamelModel):
    """Users list response schema."""
    users: List[UserResponse] = Field(..., description="List of users")
