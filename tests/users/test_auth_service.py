import pytest
from werkzeug.security import generate_password_hash

from src.school_attendance.school_attendance.core.enums import Role
from src.school_attendance.school_attendance.core.exceptions import AuthenticationError, ValidationError
from src.school_attendance.school_attendance.users.service import AuthService

from conftest import FakeUsers, make_user


@pytest.fixture
def auth():
    return AuthService(
        FakeUsers(
            [
                make_user("teacher", Role.FACULTY, password_hash=generate_password_hash("secret123")),
                make_user("gone", Role.STUDENT, password_hash=generate_password_hash("secret123"), is_active=False),
                make_user("legacy", Role.STUDENT, password_hash="CHANGE_ME"),
            ]
        )
    )


def test_authenticate_ok(auth):
    s_user = auth.authenticate("teacher", "secret123")

    assert s_user.user_id == "teacher"
    assert s_user.to_dict() == {"id": "teacher", "name": "Teacher", "role": "faculty"}


@pytest.mark.parametrize(
    "username, password",
    [("teacher", "wrong"), ("nobody", "secret123"), ("gone", "secret123"), ("legacy", "CHANGE_ME")],
)
def test_authenticate_rejects(auth, username, password):
    with pytest.raises(AuthenticationError):
        auth.authenticate(username, password)


def test_authenticate_requires_username(auth):
    with pytest.raises(ValidationError):
        auth.authenticate("  ", "secret123")


def test_resolve_actor(auth):
    assert auth.resolve_actor("teacher").role == Role.FACULTY

    for user_id in (None, "nobody", "gone"):
        with pytest.raises(AuthenticationError):
            auth.resolve_actor(user_id)
