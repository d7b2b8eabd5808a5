# storefront/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_auth, require_admin
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.common import ApiResponse, ok
from storefront.schemas.user import UserRead, UserUpdate, UserRoleUpdate
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.get("/me", response_model=ApiResponse[UserRead])
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile (created on first request).
    """
    return ok(current_user, "Profile retrieved successfully")


@router.patch("/me", response_model=ApiResponse[UserRead])
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    user = service.update_me(session, current_user, payload)
    return ok(user, "Profile updated successfully")


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=ApiResponse[list[UserRead]],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    return ok(service.list_users(session, skip, limit), "Users retrieved successfully")


@router.patch(
    "/{user_id}/role",
    response_model=ApiResponse[UserRead],
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Promote or demote a user (admin only). Allowed roles: user, admin.
    """
    return ok(service.update_role(session, user_id, payload), "Role updated successfully")
