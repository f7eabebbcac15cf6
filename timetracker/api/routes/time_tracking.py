"""
Time tracking API routes.

Provides endpoints for time entries: scoped listing, manual entries, the
live timer (start, current, stop) and deletion.
"""
from typing import Optional, Tuple
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID

from ...core.errors import ValidationError
from ...core.timecalc import parse_range_bound
from ...database.connection import get_db
from ...schemas.auth import StandardResponse
from ...schemas.time_tracking import (
    TimeEntryCreateRequest, TimeEntryStopRequest, TimeEntryResponse,
    TimeEntryEnvelope, TimeEntriesListResponse
)
from ...auth.policies import (
    ProjectAccessPolicy, TimeEntryAccessPolicy,
    get_project_policy, get_time_entry_policy
)
from ...services.timer_service import TimerService

router = APIRouter(prefix="/time-entries", tags=["Time Entries"])


def date_range(
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date filter (YYYY-MM-DD or ISO-8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date filter (YYYY-MM-DD or ISO-8601)"),
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Parse the inclusive ``startDate``/``endDate`` bounds shared by listings and reports."""
    try:
        start = parse_range_bound(start_date)
    except ValueError:
        raise ValidationError("Invalid startDate format. Use YYYY-MM-DD or ISO-8601.")
    try:
        end = parse_range_bound(end_date, end_of_day=True)
    except ValueError:
        raise ValidationError("Invalid endDate format. Use YYYY-MM-DD or ISO-8601.")
    return start, end


def get_timer_service(
    entry_policy: TimeEntryAccessPolicy = Depends(get_time_entry_policy),
    project_policy: ProjectAccessPolicy = Depends(get_project_policy),
    db: Session = Depends(get_db)
) -> TimerService:
    return TimerService(db, entry_policy, project_policy)


# PUBLIC_INTERFACE
@router.get("", response_model=TimeEntriesListResponse,
           summary="List time entries",
           description="List time entries newest first. Regular users only ever see their own entries.")
async def list_time_entries(
    service: TimerService = Depends(get_timer_service),
    project_id: Optional[UUID] = Query(None, alias="projectId", description="Filter by project"),
    user_id: Optional[str] = Query(None, alias="userId", description="Filter by user (admin only, ignored for users)"),
    bounds: Tuple[Optional[datetime], Optional[datetime]] = Depends(date_range),
):
    start_date, end_date = bounds
    entries = service.list_entries(
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
        user_id=user_id,
    )
    return TimeEntriesListResponse(
        time_entries=[TimeEntryResponse.model_validate(entry) for entry in entries]
    )


# PUBLIC_INTERFACE
@router.post("", response_model=TimeEntryEnvelope,
            summary="Create time entry",
            description="Start a live timer (isTimerEntry, no endTime) or record a manual entry.")
async def create_time_entry(
    request: TimeEntryCreateRequest,
    service: TimerService = Depends(get_timer_service)
):
    """
    Create a new time entry for the caller.

    Non-admins must be members of the project. Without ``endTime`` the
    entry stays open; with it, the duration is computed immediately.
    """
    entry = service.create_entry(
        project_id=request.project_id,
        description=request.description,
        start_time=request.start_time,
        end_time=request.end_time,
        is_timer_entry=request.is_timer_entry,
    )
    return TimeEntryEnvelope(time_entry=TimeEntryResponse.model_validate(entry))


# PUBLIC_INTERFACE
@router.get("/active", response_model=TimeEntryEnvelope,
           summary="Get running timer",
           description="Get the caller's running live timer, or null.")
async def get_running_timer(
    service: TimerService = Depends(get_timer_service)
):
    entry = service.get_running_timer()
    return TimeEntryEnvelope(time_entry=TimeEntryResponse.model_validate(entry) if entry else None)


# PUBLIC_INTERFACE
@router.get("/{entry_id}", response_model=TimeEntryEnvelope,
           summary="Get time entry")
async def get_time_entry(
    entry_id: UUID,
    service: TimerService = Depends(get_timer_service)
):
    return TimeEntryEnvelope(time_entry=TimeEntryResponse.model_validate(service.get_entry(entry_id)))


# PUBLIC_INTERFACE
@router.put("/{entry_id}", response_model=TimeEntryEnvelope,
           summary="Stop time entry",
           description="Close an open time entry, computing its duration.")
async def stop_time_entry(
    entry_id: UUID,
    request: Optional[TimeEntryStopRequest] = None,
    service: TimerService = Depends(get_timer_service)
):
    """
    Stop a running timer.

    ``endTime`` defaults to now. Closed entries cannot be stopped again.
    """
    end_time = request.end_time if request else None
    entry = service.stop_entry(entry_id, end_time)
    return TimeEntryEnvelope(time_entry=TimeEntryResponse.model_validate(entry))


# PUBLIC_INTERFACE
@router.delete("/{entry_id}", response_model=StandardResponse,
              summary="Delete time entry",
              description="Permanently delete a time entry (owner or admin).")
async def delete_time_entry(
    entry_id: UUID,
    service: TimerService = Depends(get_timer_service)
):
    service.delete_entry(entry_id)
    return StandardResponse(message="Time entry deleted")
