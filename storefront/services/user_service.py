# storefront/services/user_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import UserUpdate, UserRoleUpdate


class UserService:
    """
    Profile edits and admin role management.

    Rows are created by the auth dependency on first request; this
    service never inserts users.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        if payload.name is not None:
            current_user.name = payload.name
        return self.repo.save(session, current_user)

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        user = self.get_user(session, user_id)
        user.role = payload.role
        return self.repo.save(session, user)
