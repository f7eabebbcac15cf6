"""Project service - scoped project listing and admin project creation."""
import logging
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..auth.policies import ProjectAccessPolicy
from ..core.errors import ValidationError
from ..database.models import Project, ProjectMember, TimeEntry, User
from ..schemas.project import ProjectCount, ProjectMemberResponse, ProjectResponse

logger = logging.getLogger(__name__)


def _unique(ids: List[UUID]) -> List[UUID]:
    seen = set()
    ordered = []
    for user_id in ids:
        if user_id not in seen:
            seen.add(user_id)
            ordered.append(user_id)
    return ordered


class ProjectService:
    """Service for project operations on behalf of one caller."""

    def __init__(self, db: Session, policy: ProjectAccessPolicy):
        self.db = db
        self.policy = policy

    def _to_response(self, project: Project, entry_count: Optional[int], include_members: bool) -> ProjectResponse:
        members = None
        if include_members:
            members = [ProjectMemberResponse.model_validate(member) for member in project.project_members]
        return ProjectResponse(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=project.created_at,
            project_members=members,
            count=ProjectCount(time_entries=entry_count or 0),
        )

    def list_projects(self) -> List[ProjectResponse]:
        """
        List the projects visible to the caller, newest first.

        Admins get every project with its member list and a count of all its
        time entries. Users get the projects they are members of with a count
        of their own entries only.
        """
        criteria = [TimeEntry.project_id == Project.id]
        extra = self.policy.entry_count_filter()
        if extra is not None:
            criteria.append(extra)
        entry_count = (
            select(func.count(TimeEntry.id))
            .where(*criteria)
            .correlate(Project)
            .scalar_subquery()
        )

        query = self.db.query(Project, entry_count)
        query = self.policy.filter_query(query, Project)
        if self.policy.is_admin:
            query = query.options(selectinload(Project.project_members).selectinload(ProjectMember.user))
        rows = query.order_by(Project.created_at.desc()).all()

        return [
            self._to_response(project, count, include_members=self.policy.is_admin)
            for project, count in rows
        ]

    def create_project(self, name: Optional[str], description: Optional[str] = None,
                       user_ids: Optional[List[UUID]] = None) -> ProjectResponse:
        """
        Create a project and its memberships in one transaction.

        Args:
            name: Project name (required, non-blank)
            description: Optional description
            user_ids: Users to add as members; duplicates are collapsed

        Returns:
            ProjectResponse: Created project with its members resolved

        Raises:
            ValidationError: If the name is missing or a user id is unknown
        """
        if not name or not name.strip():
            raise ValidationError("Project name is required")

        member_ids = _unique(user_ids or [])
        if member_ids:
            known = {row[0] for row in self.db.query(User.id).filter(User.id.in_(member_ids)).all()}
            unknown = [str(user_id) for user_id in member_ids if user_id not in known]
            if unknown:
                raise ValidationError(f"Unknown user id(s): {', '.join(unknown)}")

        project = Project(id=uuid4(), name=name.strip(), description=description)
        self.db.add(project)
        for user_id in member_ids:
            self.db.add(ProjectMember(id=uuid4(), project_id=project.id, user_id=user_id))

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(project)

        logger.info("Created project %s with %d member(s)", project.id, len(member_ids))
        return self._to_response(project, 0, include_members=True)
