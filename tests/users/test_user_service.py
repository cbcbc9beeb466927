from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from taskbit.common.listing import ListQuery
from taskbit.core.enums import DateBucket, Role, UserStatus
from taskbit.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from taskbit.users.service import UserService


def test_admin_creates_user_with_hashed_password(repos, admin):
    svc = UserService(repos.users)
    uid = svc.create_user(
        current_role=Role.ADMIN,
        data={"name": "Nadia", "email": "Nadia@Example.com", "password": "pa55word", "bkash_number": " 0171 "},
    )

    user = repos.users.get_by_id(uid)
    assert user.email == "nadia@example.com"
    assert user.role == Role.USER
    assert user.bkash_number == "0171"
    assert user.password_hash != "pa55word"
    assert check_password_hash(user.password_hash, "pa55word")


def test_create_user_rejects_duplicates_and_short_passwords(repos, writer):
    svc = UserService(repos.users)
    with pytest.raises(ValidationError):
        svc.create_user(current_role=Role.ADMIN, data={"name": "X", "email": writer.email, "password": "123456"})
    with pytest.raises(ValidationError):
        svc.create_user(current_role=Role.ADMIN, data={"name": "X", "email": "x@example.com", "password": "123"})


def test_user_role_cannot_manage_users(repos):
    with pytest.raises(AuthorizationError):
        UserService(repos.users).create_user(current_role=Role.USER, data={})


def test_delete_is_soft_and_not_for_self(repos, admin, writer):
    svc = UserService(repos.users)

    with pytest.raises(ValidationError):
        svc.delete_user(current_role=Role.ADMIN, current_user_id=admin.user_id, user_id=admin.user_id)

    svc.delete_user(current_role=Role.ADMIN, current_user_id=admin.user_id, user_id=writer.user_id)
    assert repos.users.get_by_id(writer.user_id).status == UserStatus.INACTIVE

    with pytest.raises(NotFoundError):
        svc.delete_user(current_role=Role.ADMIN, current_user_id=admin.user_id, user_id=999)


def test_profile_update_ignores_role_and_status(repos, writer):
    refreshed = UserService(repos.users).update_profile(
        user_id=writer.user_id,
        data={"name": "New Name", "phone": "555", "role": "ADMIN", "status": "INACTIVE"},
    )

    assert refreshed.name == "New Name"
    assert refreshed.phone == "555"
    stored = repos.users.get_by_id(writer.user_id)
    assert stored.role == Role.USER
    assert stored.status == UserStatus.ACTIVE


def test_listing_defaults_to_active_users(repos, admin, writer, make_user, fixed_now):
    make_user(name="Old", email="old@example.com", status=UserStatus.INACTIVE)
    svc = UserService(repos.users)

    page = svc.list_users(ListQuery(), now=fixed_now)
    assert {u["email"] for u in page.data} == {admin.email, writer.email}

    inactive = svc.list_users(ListQuery(status=UserStatus.INACTIVE), now=fixed_now)
    assert [u["email"] for u in inactive.data] == ["old@example.com"]

    recent = svc.list_users(ListQuery(search="WRIT", bucket=DateBucket.LAST_DAY), now=fixed_now)
    assert recent.count == 1


def test_search_returns_active_only(repos, writer, make_user):
    make_user(name="Writer Two", email="two@example.com", status=UserStatus.INACTIVE)
    found = UserService(repos.users).search_users("writer")

    assert [u["email"] for u in found] == [writer.email]
    assert UserService(repos.users).search_users("  ") == []
    assert "password_hash" not in found[0]
