"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import (
    AppError,
    global_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)

# Import models so SQLAlchemy knows about them
from app.domain.models.user import User  # noqa: F401

from app.interfaces.api.users import router as users_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)


def bootstrap_admin() -> None:
    """Create the configured admin account unless its email is already taken."""
    from app.domain.schemas.user import UserCreate
    from app.interfaces.api.deps import build_user_service

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return

    db = SessionLocal()
    try:
        service = build_user_service(db)
        if service.repository.find_by_email(settings.ADMIN_EMAIL) is None:
            service.register_user(
                UserCreate(
                    name="Admin",
                    email=settings.ADMIN_EMAIL,
                    password=settings.ADMIN_PASSWORD,
                    age=settings.USER_MIN_AGE,
                    role="admin",
                )
            )
            logger.info("Default admin user created", email=settings.ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting accounts service...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only — use migrations in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    bootstrap_admin()

    yield

    logger.info("Accounts service stopped")


app = FastAPI(
    title="Accounts",
    description="API Backend — user registration, login and profile management",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)

# AppError is handled inside the routing layer; the Exception handler is the last resort
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)


@app.get("/")
def root():
    return {
        "name": "Accounts",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
