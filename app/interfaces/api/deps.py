"""FastAPI dependencies — service wiring and JWT auth."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.application.mapper import UserMapper
from app.application.services.user_service import UserService
from app.config import get_settings
from app.core.security import JwtTokenProvider, PasswordHasher
from app.domain.models.user import User
from app.infrastructure.database import get_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_provider() -> JwtTokenProvider:
    settings = get_settings()
    return JwtTokenProvider(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expiration_minutes=settings.JWT_EXPIRATION_MINUTES,
    )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


def build_user_service(db: Session) -> UserService:
    settings = get_settings()
    return UserService(
        repository=SQLAlchemyUserRepository(db, User),
        token_provider=get_token_provider(),
        password_hasher=get_password_hasher(),
        mapper=UserMapper(),
        min_age=settings.USER_MIN_AGE,
        max_age=settings.USER_MAX_AGE,
    )


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Get a user service bound to the request's session."""
    return build_user_service(db)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_provider: JwtTokenProvider = Depends(get_token_provider),
) -> dict:
    """Validate the bearer token and return its claims."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = token_provider.decode_token(credentials.credentials)
    if payload is None or payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload
