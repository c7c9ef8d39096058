"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, Optional, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations."""

    def find_by_id(self, id: str) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def exists_by_id(self, id: str) -> bool:
        """Check whether an entity with this ID exists."""
        ...

    def save(self, entity: T) -> T:
        """Insert a new entity or update a persisted one."""
        ...

    def delete(self, entity: T) -> None:
        """Delete an entity."""
        ...
