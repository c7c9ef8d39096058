"""User domain model — maps to the 'users' table."""

import uuid

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.infrastructure.database import Base


def generate_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("age >= 0", name="ck_users_age_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_user_id)
    name = Column(String(200), nullable=False)
    second_name = Column(String(200), nullable=True)
    # Uniqueness is enforced here; the service-level check is only a fast path
    email = Column(String(255), unique=True, nullable=False, index=True)
    age = Column(Integer, nullable=False)
    password = Column(String(255), nullable=False)  # hash, never plaintext
    role = Column(String(50), nullable=False, default="user")  # user, admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User {self.email}>"
