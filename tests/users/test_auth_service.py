from __future__ import annotations

import pytest

from presence_attendance.core.enums import Role
from presence_attendance.core.exceptions import AuthenticationError
from presence_attendance.users.service import AuthService


def test_login_success(users_repo):
    user = AuthService(users_repo).authenticate("teacher", "teacher123")

    assert user.user_id == 2
    assert user.role == Role.TEACHER
    assert user.to_dict() == {"id": 2, "name": "Tess Teacher", "role": "teacher"}


@pytest.mark.parametrize(
    "username, password",
    [
        ("teacher", "wrong"),
        ("nobody", "teacher123"),
        ("", "teacher123"),
        ("   ", "x"),
        ("old", "old123"),
    ],
)
def test_login_failures_share_one_message(users_repo, username, password):
    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        AuthService(users_repo).authenticate(username, password)
