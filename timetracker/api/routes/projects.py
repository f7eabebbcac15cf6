"""
Project management API routes.

Provides role-scoped project listing and admin project creation with
member assignment.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...schemas.project import ProjectCreateRequest, ProjectEnvelope, ProjectsListResponse
from ...auth.dependencies import require_admin, CurrentUser
from ...auth.policies import ProjectAccessPolicy, get_project_policy
from ...services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["Projects"])


# PUBLIC_INTERFACE
@router.get("", response_model=ProjectsListResponse,
           summary="List projects",
           description="Admins see every project with members; users see the projects they belong to.")
async def list_projects(
    policy: ProjectAccessPolicy = Depends(get_project_policy),
    db: Session = Depends(get_db)
):
    """
    List projects visible to the caller.

    Each project carries ``_count.timeEntries``: all entries for admins,
    the caller's own entries for regular users.
    """
    return ProjectsListResponse(projects=ProjectService(db, policy).list_projects())


# PUBLIC_INTERFACE
@router.post("", response_model=ProjectEnvelope,
            summary="Create new project",
            description="Create a project and assign its members (admin only).")
async def create_project(
    request: ProjectCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create a new project.

    The project and one membership per listed user are written in a single
    transaction.
    """
    service = ProjectService(db, ProjectAccessPolicy(current_user))
    project = service.create_project(request.name, request.description, request.user_ids)
    return ProjectEnvelope(project=project)
