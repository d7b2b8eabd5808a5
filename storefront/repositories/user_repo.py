# storefront/repositories/user_repo.py
import uuid

from sqlmodel import Session, col, select

from storefront.models.user import User


class UserRepository:
    """
    Data access layer for the users mirror table.
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        return session.get(User, user_id)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        stmt = select(User).order_by(col(User.created_at)).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def save(self, session: Session, user: User) -> User:
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
