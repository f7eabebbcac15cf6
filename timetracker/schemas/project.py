"""
Project-related Pydantic schemas.

Defines request/response models for project listing and creation,
including the member list and the scoped time entry count.
"""
from typing import Optional, List
from pydantic import Field, model_serializer
from uuid import UUID

from .base import CamelModel, UtcDateTime
from .user import UserReference


class ProjectCreateRequest(CamelModel):
    """
    Project creation request schema.

    ``name`` is checked by the service so a missing or blank name yields
    "Project name is required".
    """
    name: Optional[str] = Field(None, max_length=255, description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    user_ids: List[UUID] = Field(default_factory=list, description="Members to assign")


class ProjectMemberResponse(CamelModel):
    """Project membership with the member's details."""
    id: UUID = Field(..., description="Membership ID")
    project_id: UUID = Field(..., description="Project ID")
    user_id: UUID = Field(..., description="User ID")
    user: Optional[UserReference] = Field(None, description="Member details")


class ProjectCount(CamelModel):
    """Related row counts."""
    time_entries: int = Field(0, description="Time entries visible to the caller")


class ProjectResponse(CamelModel):
    """
    Project response schema.

    ``projectMembers`` is only emitted when the member list was resolved
    (admin listings and project creation).
    """
    id: UUID = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    created_at: UtcDateTime = Field(..., description="Creation timestamp")
    project_members: Optional[List[ProjectMemberResponse]] = Field(None, description="Project members")
    count: Optional[ProjectCount] = Field(None, alias="_count", description="Related row counts")

    @model_serializer(mode="wrap")
    def _omit_unresolved(self, handler):
        data = handler(self)
        for attribute, key in (("project_members", "projectMembers"), ("count", "_count")):
            if getattr(self, attribute) is None:
                data.pop(key, None)
                data.pop(attribute, None)
        return data


class ProjectsListResponse(CamelModel):
    """Projects list response schema."""
    projects: List[ProjectResponse] = Field(..., description="Projects visible to the caller")


class ProjectEnvelope(CamelModel):
    """Single project response."""
    project: ProjectResponse = Field(..., description="Project")
