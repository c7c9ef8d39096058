"""User service — registration, login and profile management."""

from typing import Any, Dict

import structlog

from app.application.mapper import UserMapper
from app.core.exceptions import (
    DuplicateEntityException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
    UserNotFoundException,
    UserServiceException,
    ValidationException,
)
from app.core.security import JwtTokenProvider, PasswordHasher
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import LoginDTO, UserCreate, UserDTO, UserProjection

logger = structlog.get_logger(__name__)


class UserService:
    """Orchestrates the user store, password hasher, token provider and mapper.

    Every operation returns the same envelope: a message, a freshly minted
    token and the user's projection (never the password). Domain failures are
    logged and re-raised; anything else is logged and wrapped in
    UserServiceException with the original message.
    """

    def __init__(
        self,
        repository: UserRepository,
        token_provider: JwtTokenProvider,
        password_hasher: PasswordHasher,
        mapper: UserMapper,
        min_age: int = 0,
        max_age: int = 120,
    ):
        self.repository = repository
        self.token_provider = token_provider
        self.password_hasher = password_hasher
        self.mapper = mapper
        self.min_age = min_age
        self.max_age = max_age

    def register_user(self, user_dto: UserCreate) -> Dict[str, Any]:
        try:
            if self.repository.find_by_email(user_dto.email) is not None:
                raise UserAlreadyExistsException(f"User with email {user_dto.email} already exists")

            user = self.mapper.to_entity(user_dto)
            user.password = self.password_hasher.hash(user.password)
            try:
                user = self.repository.save(user)
            except DuplicateEntityException as e:
                # Lost the race against a concurrent registration
                raise UserAlreadyExistsException(f"User with email {user_dto.email} already exists") from e

            logger.info("User registered", user_id=user.id)
            return self._create_response("User registered successfully", self.mapper.to_dto(user))
        except UserAlreadyExistsException as e:
            logger.error("User already exists", error=e.message)
            raise
        except Exception as e:
            logger.error("Error registering user", error=str(e))
            raise UserServiceException(f"Error registering user: {e}") from e

    def login(self, login_dto: LoginDTO) -> Dict[str, Any]:
        try:
            user = self.repository.find_by_email(login_dto.email)
            if user is None:
                raise UserNotFoundException(f"User with email {login_dto.email} not found")

            if not self.password_hasher.verify(login_dto.password, user.password):
                raise InvalidCredentialsException("Invalid password")

            return self._create_response("User logged in successfully", self.mapper.to_dto(user))
        except (UserNotFoundException, InvalidCredentialsException) as e:
            logger.error("Login error", error=e.message)
            raise
        except Exception as e:
            logger.error("Error logging in", error=str(e))
            raise UserServiceException(f"Error logging in: {e}") from e

    def update_user(self, user_id: str, user_dto: UserDTO) -> Dict[str, Any]:
        """Overwrite a user's profile; the password changes only when a new one is given.

        The age check runs before the lookup, so an invalid age is reported
        even for ids that do not exist. The email is not re-checked for
        uniqueness here; a collision is rejected by the store.
        """
        try:
            user_dto.validate_age(self.min_age, self.max_age)

            user = self._get_or_raise(user_id)

            user.name = user_dto.name
            user.second_name = user_dto.second_name
            user.email = user_dto.email
            user.age = user_dto.age

            if user_dto.password:
                user.password = self.password_hasher.hash(user_dto.password)

            user = self.repository.save(user)

            return self._create_response("User updated successfully", self.mapper.to_dto(user))
        except (ValidationException, UserNotFoundException) as e:
            logger.error("Error updating user", user_id=user_id, error=e.message)
            raise
        except Exception as e:
            logger.error("Error updating user", user_id=user_id, error=str(e))
            raise UserServiceException(f"Error updating user: {e}") from e

    def get_user(self, user_id: str) -> Dict[str, Any]:
        try:
            user = self._get_or_raise(user_id)
            return self._create_response("User found", self.mapper.to_dto(user))
        except UserNotFoundException as e:
            logger.error("Error getting user", error=e.message)
            raise
        except Exception as e:
            logger.error("Error getting user", user_id=user_id, error=str(e))
            raise UserServiceException(f"Error getting user: {e}") from e

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        try:
            user = self._get_or_raise(user_id)
            snapshot = self.mapper.to_dto(user)

            self.repository.delete(user)

            logger.info("User deleted", user_id=user_id)
            return self._create_response("User deleted successfully", snapshot)
        except UserNotFoundException as e:
            logger.error("Error deleting user", error=e.message)
            raise
        except Exception as e:
            logger.error("Error deleting user", user_id=user_id, error=str(e))
            raise UserServiceException(f"Error deleting user: {e}") from e

    def exists_by_id(self, user_id: str) -> bool:
        return self.repository.exists_by_id(user_id)

    def _get_or_raise(self, user_id: str) -> User:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise UserNotFoundException(f"User with id {user_id} not found")
        return user

    def _create_response(self, message: str, user_dto: UserDTO) -> Dict[str, Any]:
        return {
            "message": message,
            "token": self.token_provider.generate_token(user_dto.email, user_dto.role),
            "user": UserProjection.model_validate(user_dto.model_dump()).model_dump(by_alias=True),
        }
