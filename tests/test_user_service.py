from unittest import mock

import pytest

from app.application.mapper import UserMapper
from app.application.services.user_service import UserService
from app.core.exceptions import (
    DuplicateEntityException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
    UserNotFoundException,
    UserServiceException,
    ValidationException,
)
from app.domain.models.user import User
from app.domain.schemas.user import LoginDTO, UserCreate, UserDTO

PROFILE_FIELDS = ("id", "name", "secondName", "email", "age", "role")


def make_user(**overrides) -> UserCreate:
    data = {"email": "a@x.com", "password": "pw123", "name": "A", "age": 30}
    data.update(overrides)
    return UserCreate(**data)


def profile(envelope):
    return {field: envelope["user"][field] for field in PROFILE_FIELDS}


@pytest.fixture
def registered(user_service):
    return user_service.register_user(make_user(secondName="B"))


def test_register_returns_envelope_with_default_role(user_service, token_provider):
    result = user_service.register_user(make_user())

    assert result["message"] == "User registered successfully"
    assert result["token"]
    assert result["user"]["role"] == "user"
    assert result["user"]["email"] == "a@x.com"
    assert result["user"]["id"]
    assert "password" not in result["user"]

    claims = token_provider.decode_token(result["token"])
    assert claims["sub"] == "a@x.com"
    assert claims["role"] == "user"


def test_register_duplicate_email_fails_without_new_record(user_service, db_session):
    user_service.register_user(make_user())

    with pytest.raises(UserAlreadyExistsException):
        user_service.register_user(make_user(name="Other"))

    assert db_session.query(User).count() == 1


def test_register_stores_verifiable_hash(user_service, db_session, password_hasher, registered):
    stored = db_session.get(User, registered["user"]["id"])

    assert stored.password != "pw123"
    assert password_hasher.verify("pw123", stored.password)


def test_register_maps_store_uniqueness_violation_to_already_exists(user_service):
    # The pre-check misses a concurrent registration; the store rejects the insert
    user_service.repository = mock.Mock(wraps=user_service.repository)
    user_service.repository.find_by_email.return_value = None
    user_service.repository.save.side_effect = DuplicateEntityException("User violates a unique constraint")

    with pytest.raises(UserAlreadyExistsException):
        user_service.register_user(make_user())


def test_register_negative_age_is_rejected_by_store(user_service, db_session):
    with pytest.raises(UserServiceException) as exc_info:
        user_service.register_user(make_user(age=-7))

    assert exc_info.value.message.startswith("Error registering user:")
    assert db_session.query(User).count() == 0


def test_register_wraps_unexpected_failures(user_service):
    user_service.password_hasher = mock.Mock()
    user_service.password_hasher.hash.side_effect = RuntimeError("hasher exploded")

    with pytest.raises(UserServiceException) as exc_info:
        user_service.register_user(make_user())

    assert exc_info.value.message == "Error registering user: hasher exploded"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_login_success(user_service, registered):
    result = user_service.login(LoginDTO(email="a@x.com", password="pw123"))

    assert result["message"] == "User logged in successfully"
    assert result["token"]
    assert "password" not in result["user"]
    assert result["user"]["id"] == registered["user"]["id"]


def test_login_unknown_email(user_service):
    with pytest.raises(UserNotFoundException):
        user_service.login(LoginDTO(email="nobody@x.com", password="pw123"))


def test_login_wrong_password_does_not_touch_store(user_service, registered):
    user_service.repository = mock.Mock(wraps=user_service.repository)

    with pytest.raises(InvalidCredentialsException):
        user_service.login(LoginDTO(email="a@x.com", password="nope"))

    user_service.repository.save.assert_not_called()
    user_service.repository.delete.assert_not_called()


def test_get_user_is_idempotent_on_profile(user_service, registered):
    user_id = registered["user"]["id"]

    first = user_service.get_user(user_id)
    second = user_service.get_user(user_id)

    assert first["message"] == "User found"
    assert profile(first) == profile(second)
    assert first["token"] and second["token"]


def test_register_then_get_round_trip(user_service, registered):
    fetched = user_service.get_user(registered["user"]["id"])

    assert profile(fetched) == profile(registered)
    assert fetched["user"]["secondName"] == "B"


def test_get_user_not_found(user_service):
    with pytest.raises(UserNotFoundException):
        user_service.get_user("missing")


def test_update_overwrites_profile_and_keeps_password(user_service, db_session, password_hasher, registered):
    user_id = registered["user"]["id"]

    result = user_service.update_user(
        user_id, UserDTO(name="New", secondName=None, email="new@x.com", age=41)
    )

    assert result["message"] == "User updated successfully"
    assert result["user"] == {
        "id": user_id,
        "name": "New",
        "secondName": None,
        "email": "new@x.com",
        "age": 41,
        "role": "user",
    }
    stored = db_session.get(User, user_id)
    assert password_hasher.verify("pw123", stored.password)


def test_update_empty_password_keeps_hash(user_service, db_session, registered):
    user_id = registered["user"]["id"]
    before = db_session.get(User, user_id).password

    user_service.update_user(user_id, UserDTO(name="A", email="a@x.com", age=30, password=""))

    assert db_session.get(User, user_id).password == before


def test_update_with_password_rehashes(user_service, db_session, password_hasher, registered):
    user_id = registered["user"]["id"]

    user_service.update_user(user_id, UserDTO(name="A", email="a@x.com", age=30, password="fresh"))

    stored = db_session.get(User, user_id)
    assert password_hasher.verify("fresh", stored.password)
    assert not password_hasher.verify("pw123", stored.password)


def test_update_does_not_change_role(user_service, registered):
    result = user_service.update_user(
        registered["user"]["id"], UserDTO(name="A", email="a@x.com", age=30, role="admin")
    )
    assert result["user"]["role"] == "user"


@pytest.mark.parametrize("age", [-1, 121])
def test_update_invalid_age_leaves_record_unchanged(user_service, registered, age):
    user_id = registered["user"]["id"]

    with pytest.raises(ValidationException):
        user_service.update_user(user_id, UserDTO(name="Z", email="z@x.com", age=age))

    assert profile(user_service.get_user(user_id)) == profile(registered)


def test_update_invalid_age_checked_before_lookup(user_service):
    user_service.repository = mock.Mock(wraps=user_service.repository)

    with pytest.raises(ValidationException):
        user_service.update_user("missing", UserDTO(name="Z", email="z@x.com", age=-1))

    user_service.repository.find_by_id.assert_not_called()


def test_update_not_found(user_service):
    with pytest.raises(UserNotFoundException):
        user_service.update_user("missing", UserDTO(name="Z", email="z@x.com", age=20))


def test_update_to_taken_email_is_rejected_by_store(user_service, registered):
    user_service.register_user(make_user(email="b@x.com"))

    with pytest.raises(UserServiceException) as exc_info:
        user_service.update_user(registered["user"]["id"], UserDTO(name="A", email="b@x.com", age=30))

    assert exc_info.value.message.startswith("Error updating user:")


def test_delete_returns_snapshot_and_removes_record(user_service, registered):
    user_id = registered["user"]["id"]

    result = user_service.delete_user(user_id)

    assert result["message"] == "User deleted successfully"
    assert profile(result) == profile(registered)
    assert not user_service.exists_by_id(user_id)
    with pytest.raises(UserNotFoundException):
        user_service.get_user(user_id)


def test_delete_not_found(user_service):
    with pytest.raises(UserNotFoundException):
        user_service.delete_user("missing")


def test_exists_by_id(user_service, registered):
    assert user_service.exists_by_id(registered["user"]["id"])
    assert not user_service.exists_by_id("missing")


def test_service_is_wired_through_its_constructor(repository, token_provider, password_hasher):
    mapper = UserMapper()
    service = UserService(repository, token_provider, password_hasher, mapper, min_age=18, max_age=65)

    with pytest.raises(ValidationException):
        service.update_user("missing", UserDTO(name="Z", email="z@x.com", age=17))
