"""User API routes — register, login and profile management."""

from fastapi import APIRouter, Depends, Response, status

from app.application.services.user_service import UserService
from app.config import get_settings
from app.domain.schemas.user import AuthResponse, LoginDTO, UserCreate, UserDTO
from app.interfaces.api.deps import get_current_claims, get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, service: UserService = Depends(get_user_service)):
    """Register a user and return a token for it.

    The ``role`` in the body is accepted as sent, so the token's role claim is
    self-asserted here. Downstream verifiers must not grant privileges on it.
    """
    settings = get_settings()
    body.validate_age(settings.USER_MIN_AGE, settings.USER_MAX_AGE)
    return service.register_user(body)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginDTO, service: UserService = Depends(get_user_service)):
    return service.login(body)


@router.get("/{user_id}", response_model=AuthResponse, dependencies=[Depends(get_current_claims)])
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.get_user(user_id)


@router.put("/{user_id}", response_model=AuthResponse, dependencies=[Depends(get_current_claims)])
def update_user(user_id: str, body: UserDTO, service: UserService = Depends(get_user_service)):
    return service.update_user(user_id, body)


@router.delete("/{user_id}", response_model=AuthResponse, dependencies=[Depends(get_current_claims)])
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.delete_user(user_id)


@router.head("/{user_id}", dependencies=[Depends(get_current_claims)])
def user_exists(user_id: str, service: UserService = Depends(get_user_service)):
    if service.exists_by_id(user_id):
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_404_NOT_FOUND)
