"""
Time tracking-related Pydantic schemas.

Defines request/response models for time entries, the live timer and the
admin summary report.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import Field, field_validator
from uuid import UUID

from .base import CamelModel, UtcDateTime
from .user import UserReference


class TimeEntryCreateRequest(CamelModel):
    """
    Time entry creation request schema.

    Required fields are validated by the service so any missing one yields a
    single "Project, description, and start time are required" error.
    """
    project_id: Optional[UUID] = Field(None, description="Project ID")
    description: Optional[str] = Field(None, description="Work description")
    start_time: Optional[datetime] = Field(None, description="Start time")
    end_time: Optional[datetime] = Field(None, description="End time (null for running timer)")
    is_timer_entry: bool = Field(default=False, description="Whether this entry is started from the live timer")

    @field_validator("project_id", "start_time", "end_time", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TimeEntryStopRequest(CamelModel):
    """Timer stop request schema."""
    end_time: Optional[datetime] = Field(None, description="Stop time (defaults to now)")


class ProjectReference(CamelModel):
    """Project fields embedded in a time entry."""
    id: UUID = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")


class TimeEntryResponse(CamelModel):
    """Time entry response schema."""
    id: UUID = Field(..., description="Time entry ID")
    user_id: UUID = Field(..., description="User ID")
    project_id: UUID = Field(..., description="Project ID")
    description: str = Field(..., description="Work description")
    start_time: UtcDateTime = Field(..., description="Start time")
    end_time: Optional[UtcDateTime] = Field(None, description="End time")
    duration: Optional[int] = Field(None, description="Duration in minutes")
    is_active: bool = Field(..., description="Whether the live timer is running")
    created_at: UtcDateTime = Field(..., description="Creation timestamp")
    updated_at: Optional[UtcDateTime] = Field(None, description="Last update timestamp")
    project: Optional[ProjectReference] = Field(None, description="Project")
    user: Optional[UserReference] = Field(None, description="Owner")


class TimeEntryEnvelope(CamelModel):
    """Single time entry response; ``timeEntry`` is null when nothing matched."""
    time_entry: Optional[TimeEntryResponse] = Field(None, description="Time entry")


class TimeEntriesListResponse(CamelModel):
    """Time entries list response schema."""
    time_entries: List[TimeEntryResponse] = Field(..., description="Time entries, newest first")


class ProjectSummaryReference(CamelModel):
    """Project fields attached to a report row."""
    id: UUID = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    description: Optional[str] = Field(None, description="Project description")


class UserSummaryRow(CamelModel):
    """Totals for one user."""
    user: Optional[UserReference] = Field(None, description="User, null if it no longer exists")
    total_minutes: int = Field(..., description="Sum of durations in minutes")
    total_hours: float = Field(..., description="Total hours rounded to two decimals")
    entry_count: int = Field(..., description="Number of closed entries")


class ProjectSummaryRow(CamelModel):
    """Totals for one project."""
    project: Optional[ProjectSummaryReference] = Field(None, description="Project, null if it no longer exists")
    total_minutes: int = Field(..., description="Sum of durations in minutes")
    total_hours: float = Field(..., description="Total hours rounded to two decimals")
    entry_count: int = Field(..., description="Number of closed entries")


class ReportSummaryResponse(CamelModel):
    """Summary report response schema."""
    user_summary: List[UserSummaryRow] = Field(..., description="Totals grouped by user")
    project_summary: List[ProjectSummaryRow] = Field(..., description="Totals grouped by project")
