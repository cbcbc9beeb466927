from __future__ import annotations

import pytest

from taskbit.core.enums import Role, UserStatus
from taskbit.core.exceptions import AuthenticationError
from taskbit.users.service import AuthService, SessionUser


def test_login_success_returns_full_profile(repos, writer):
    s_user = AuthService(repos.users).authenticate("  WRITER@example.com ", "secret123")

    assert s_user.user_id == writer.user_id
    assert s_user.role == Role.USER
    assert s_user.email == "writer@example.com"


def test_wrong_password_fails(repos, writer):
    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate("writer@example.com", "wrong-password")


def test_unknown_email_fails(repos):
    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate("nobody@example.com", "secret123")


def test_inactive_user_cannot_sign_in(repos, make_user):
    make_user(email="gone@example.com", status=UserStatus.INACTIVE)
    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate("gone@example.com", "secret123")


def test_missing_credentials_fail(repos):
    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate("", "")


def test_session_payload_round_trips(repos, writer):
    s_user = AuthService(repos.users).authenticate("writer@example.com", "secret123")
    data = s_user.to_session()

    assert data["role"] == "USER"
    assert SessionUser.from_session(data) == s_user
    assert SessionUser.from_session({"role": "NOPE"}) is None
