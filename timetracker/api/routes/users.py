"""
User management API routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...schemas.user import UserResponse, UsersListResponse
from ...auth.dependencies import require_admin, CurrentUser
from ...services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get("", response_model=UsersListResponse,
           summary="List users",
           description="Get every user account (admin only). Used to pick project members.")
async def list_users(
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    users = UserService(db).list_users()
    return UsersListResponse(users=[UserResponse.model_validate(user) for user in users])
