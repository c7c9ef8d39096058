"""
User Repository Interface.
Implementations must enforce email uniqueness at the storage layer.
"""

from typing import Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def find_by_email(self, email: str) -> Optional[User]:
        """Get the user registered with this email, if any."""
        ...
