"""Conversion between user transfer objects and the persisted User entity."""

from pydantic import BaseModel

from app.domain.models.user import User
from app.domain.schemas.user import UserDTO


class UserMapper:
    """Field-for-field copy by name between schemas and the User model."""

    def to_entity(self, dto: BaseModel) -> User:
        """Build a transient User from any schema carrying user fields.

        Unset and None fields are skipped so column defaults (id, role) apply.
        """
        columns = set(User.__table__.columns.keys())
        data = dto.model_dump(exclude_unset=True, exclude_none=True)
        return User(**{field: value for field, value in data.items() if field in columns})

    def to_dto(self, user: User) -> UserDTO:
        return UserDTO.model_validate(user)
