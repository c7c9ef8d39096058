import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "tests-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.application.mapper import UserMapper
from app.application.services.user_service import UserService
from app.core.security import JwtTokenProvider, PasswordHasher
from app.domain.models.user import User
from app.infrastructure.database import Base, get_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

SECRET_KEY = "tests-secret-key"


@pytest.fixture(scope="function")
def engine():
    """A fresh in-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db_session):
    return SQLAlchemyUserRepository(db_session, User)


@pytest.fixture(scope="session")
def password_hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def token_provider():
    return JwtTokenProvider(secret_key=SECRET_KEY)


@pytest.fixture
def user_service(repository, token_provider, password_hasher):
    return UserService(
        repository=repository,
        token_provider=token_provider,
        password_hasher=password_hasher,
        mapper=UserMapper(),
        min_age=0,
        max_age=120,
    )


@pytest.fixture
def client(engine):
    """HTTP client whose requests run against the per-test database."""
    from app.main import app

    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
