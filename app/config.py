"""Accounts Backend — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./accounts.db"

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # User policy
    USER_MIN_AGE: int = 0
    USER_MAX_AGE: int = 120

    # Bootstrap admin (skipped when empty)
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
