"""Timer service - time entry lifecycle and scoped listing."""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import desc
from sqlalchemy.orm import Session, joinedload

from ..auth.policies import ProjectAccessPolicy, TimeEntryAccessPolicy
from ..core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.timecalc import duration_minutes, to_utc, utcnow
from ..database.models import Project, TimeEntry

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Project, description, and start time are required"
END_BEFORE_START_MESSAGE = "End time cannot be before start time"


class TimerService:
    """
    Service for handling time entries on behalf of one caller.

    An entry is either created open (live timer: no end time, active) or
    closed (manual entry: both times supplied). An open entry is closed
    exactly once by ``stop_entry``; closed entries only change by deletion.
    """

    def __init__(self, db: Session, entry_policy: TimeEntryAccessPolicy,
                 project_policy: ProjectAccessPolicy):
        self.db = db
        self.entry_policy = entry_policy
        self.project_policy = project_policy

    def _entries(self):
        return self.db.query(TimeEntry).options(
            joinedload(TimeEntry.project),
            joinedload(TimeEntry.user),
        )

    def _running_timer(self, user_id: UUID) -> Optional[TimeEntry]:
        return self._entries().filter(
            TimeEntry.user_id == user_id,
            TimeEntry.is_active == True,  # noqa: E712
            TimeEntry.end_time.is_(None),
        ).first()

    def _get_modifiable(self, entry_id: UUID) -> TimeEntry:
        entry = self._entries().filter(TimeEntry.id == entry_id).first()
        if not entry:
            raise NotFoundError("Time entry not found")
        if not self.entry_policy.can_modify(entry):
            raise AuthorizationError("Access denied to this time entry")
        return entry

    def list_entries(
        self,
        project_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        user_id: Optional[str] = None,
    ) -> List[TimeEntry]:
        """
        List time entries visible to the caller, newest first.

        Args:
            project_id: Optional project filter
            start_date: Optional inclusive lower bound on start time
            end_date: Optional inclusive upper bound on start time
            user_id: Optional owner filter (honoured for admins only)

        Returns:
            List of time entries with project and user loaded
        """
        query = self.entry_policy.filter_query(self._entries(), user_id)

        if project_id:
            query = query.filter(TimeEntry.project_id == project_id)
        if start_date:
            query = query.filter(TimeEntry.start_time >= to_utc(start_date))
        if end_date:
            query = query.filter(TimeEntry.start_time <= to_utc(end_date))

        return query.order_by(desc(TimeEntry.start_time)).all()

    def get_entry(self, entry_id: UUID) -> TimeEntry:
        return self._get_modifiable(entry_id)

    def get_running_timer(self) -> Optional[TimeEntry]:
        """Get the caller's running live timer, if any."""
        return self._running_timer(self.entry_policy.user_id)

    def create_entry(
        self,
        project_id: Optional[UUID],
        description: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime] = None,
        is_timer_entry: bool = False,
    ) -> TimeEntry:
        """
        Start a live timer or record a manual entry for the caller.

        Without ``end_time`` the entry is open; it is active only when created
        from the live timer. With ``end_time`` the entry is closed and its
        duration computed.

        Raises:
            ValidationError: If a required field is missing or end precedes start
            AuthorizationError: If a non-admin is not a member of the project
            NotFoundError: If the project does not exist
            ConflictError: If the caller already has a running timer
        """
        if not project_id or not description or not description.strip() or not start_time:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        if not self.project_policy.can_log_time(self.db, project_id):
            raise AuthorizationError("Access denied to this project")

        if not self.db.query(Project.id).filter(Project.id == project_id).first():
            raise NotFoundError("Project not found")

        start = to_utc(start_time)
        end = to_utc(end_time)
        duration = None
        if end is not None:
            if end < start:
                raise ValidationError(END_BEFORE_START_MESSAGE)
            duration = duration_minutes(start, end)

        is_active = bool(is_timer_entry) and end is None
        owner_id = self.entry_policy.user_id
        if is_active and self._running_timer(owner_id):
            raise ConflictError("You already have a running timer. Stop it before starting a new one.")

        entry = TimeEntry(
            id=uuid4(),
            user_id=owner_id,
            project_id=project_id,
            description=description,
            start_time=start,
            end_time=end,
            duration=duration,
            is_active=is_active,
        )
        self.db.add(entry)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(entry)

        if is_active:
            logger.info("Timer %s started by user %s", entry.id, owner_id)
        else:
            logger.info("Time entry %s recorded by user %s", entry.id, owner_id)
        return entry

    def stop_entry(self, entry_id: UUID, end_time: Optional[datetime] = None) -> TimeEntry:
        """
        Close an open entry.

        Args:
            entry_id: Time entry ID
            end_time: Stop instant (defaults to now)

        Returns:
            The closed entry with duration set and ``is_active`` cleared

        Raises:
            NotFoundError: If the entry does not exist
            AuthorizationError: If the caller neither owns it nor is an admin
            ConflictError: If the entry is already closed
            ValidationError: If the stop instant precedes the start
        """
        entry = self._get_modifiable(entry_id)
        if entry.end_time is not None:
            raise ConflictError("Time entry is already stopped")

        start = to_utc(entry.start_time)
        end = to_utc(end_time) if end_time is not None else utcnow()
        if end < start:
            raise ValidationError(END_BEFORE_START_MESSAGE)

        entry.end_time = end
        entry.duration = duration_minutes(start, end)
        entry.is_active = False
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(entry)

        logger.info("Time entry %s stopped after %d minute(s)", entry.id, entry.duration)
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        """
        Delete a time entry (hard delete).

        Raises:
            NotFoundError: If the entry does not exist
            AuthorizationError: If the caller neither owns it nor is an admin
        """
        entry = self._get_modifiable(entry_id)
        self.db.delete(entry)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Time entry %s deleted", entry_id)
