"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Optional

from sqlalchemy import select

from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()
