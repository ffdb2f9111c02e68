# storefront/repositories/user_repo.py
from sqlmodel import Session, select

from storefront.models.user import User


class UserRepository:
    """
    Data access layer for local login credentials.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_username(self, session: Session, username: str) -> User | None:
        """Return a User by unique username, or None if not found."""
        stmt = select(User).where(User.username == username)
        return session.exec(stmt).first()

    def create(self, session: Session, user: User) -> User:
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User (e.g. a rehashed password)."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
