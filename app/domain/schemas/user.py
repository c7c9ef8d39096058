"""Pydantic schemas for users: transfer objects and the response envelope."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import ValidationException

Role = Literal["user", "admin"]


class UserBase(BaseModel):
    name: str
    second_name: Optional[str] = Field(default=None, alias="secondName")
    email: str
    age: int
    role: Role = "user"

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    def validate_age(self, min_age: int, max_age: int) -> None:
        """Raise ValidationException unless min_age <= age <= max_age."""
        if not min_age <= self.age <= max_age:
            raise ValidationException(
                f"Age must be between {min_age} and {max_age}",
                details={"age": self.age},
            )


class UserDTO(UserBase):
    """Wire shape of a user. ``password`` is plaintext on input only."""
    id: Optional[str] = None
    password: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=1)


class LoginDTO(BaseModel):
    email: str
    password: str


class UserProjection(BaseModel):
    """The part of a user that is safe to hand back to callers."""
    id: str
    name: str
    second_name: Optional[str] = Field(default=None, alias="secondName")
    email: str
    age: int
    role: str

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserProjection
