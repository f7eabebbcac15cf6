"""
Role-scoped access policies.

Each policy is built from the caller's identity and owns every
"who can see/modify what" decision for one entity, so routes and services
never branch on the role themselves.
"""
from typing import Optional, Union
from uuid import UUID

from fastapi import Depends
from sqlalchemy import exists, and_
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..database.models import ProjectMember, TimeEntry
from .dependencies import CurrentUser, require_auth


class ProjectAccessPolicy:
    """Project visibility and time-logging rights for one caller."""

    def __init__(self, current_user: CurrentUser):
        self.user_id = current_user.user_id
        self.is_admin = current_user.is_admin

    def membership_clause(self, project_id_column):
        """EXISTS clause matching projects the caller is a member of."""
        return exists().where(and_(
            ProjectMember.project_id == project_id_column,
            ProjectMember.user_id == self.user_id,
        ))

    def filter_query(self, query, model_class):
        """Admins see every project, users only the ones they belong to."""
        if self.is_admin:
            return query
        return query.filter(self.membership_clause(model_class.id))

    def entry_count_filter(self):
        """
        Extra criteria applied when counting a project's time entries.

        Admins count every entry; users count only their own.
        """
        if self.is_admin:
            return None
        return TimeEntry.user_id == self.user_id

    def can_log_time(self, db: Session, project_id: UUID) -> bool:
        """Admins may log against any project; users need a membership row."""
        if self.is_admin:
            return True
        return db.query(self.membership_clause(project_id)).scalar()


class TimeEntryAccessPolicy:
    """Time entry visibility and ownership rules for one caller."""

    def __init__(self, current_user: CurrentUser):
        self.user_id = current_user.user_id
        self.is_admin = current_user.is_admin

    def effective_user_id(self, requested_user_id: Optional[Union[str, UUID]]) -> Optional[UUID]:
        """
        Resolve the ``userId`` filter for a listing.

        Users are always pinned to themselves whatever they ask for, so their
        value is never parsed. Admins get the requested user, or everyone when
        nothing is requested.

        Raises:
            ValidationError: If an admin supplies a malformed user id
        """
        if not self.is_admin:
            return self.user_id
        if not requested_user_id:
            return None
        if isinstance(requested_user_id, UUID):
            return requested_user_id
        try:
            return UUID(requested_user_id)
        except ValueError:
            raise ValidationError("Invalid userId")

    def filter_query(self, query, requested_user_id: Optional[Union[str, UUID]] = None):
        user_id = self.effective_user_id(requested_user_id)
        if user_id is not None:
            query = query.filter(TimeEntry.user_id == user_id)
        return query

    def can_modify(self, entry: TimeEntry) -> bool:
        """Owners and admins may stop or delete an entry."""
        return self.is_admin or entry.user_id == self.user_id


# PUBLIC_INTERFACE
async def get_project_policy(
    current_user: CurrentUser = Depends(require_auth)
) -> ProjectAccessPolicy:
    """Get the project access policy for the authenticated caller."""
    return ProjectAccessPolicy(current_user)


# PUBLIC_INTERFACE
async def get_time_entry_policy(
    current_user: CurrentUser = Depends(require_auth)
) -> TimeEntryAccessPolicy:
    """Get the time entry access policy for the authenticated caller."""
    return TimeEntryAccessPolicy(current_user)
