"""
SQLAlchemy implementation of the Base Repository.
"""

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateEntityException
from app.domain.repositories.base import BaseRepository
from app.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def find_by_id(self, id: str) -> Optional[ModelType]:
        return self.db.get(self.model, id)

    def exists_by_id(self, id: str) -> bool:
        return bool(self.db.scalar(select(exists().where(self.model.id == id))))

    def save(self, entity: ModelType) -> ModelType:
        # add() inserts transient objects and is a no-op for ones already in the session
        self.db.add(entity)
        self._commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self._commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not is_unique_violation(e):
                raise
            raise DuplicateEntityException(
                f"{self.model.__name__} violates a unique constraint",
                details={"reason": str(e.orig)},
            ) from e


def is_unique_violation(error: IntegrityError) -> bool:
    """True for unique-key violations (PostgreSQL SQLSTATE 23505, SQLite UNIQUE)."""
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()
