from __future__ import annotations

import pytest

from taskbit.core.enums import Role
from taskbit.guard.route_guard import decide, is_guarded


@pytest.mark.parametrize("path", ["/signin", "/", "/api/tasks", "/dashboards"])
def test_paths_outside_dashboard_are_not_guarded(path):
    assert not is_guarded(path)
    assert decide(None, path) is None


@pytest.mark.parametrize("path", ["/dashboard", "/dashboard/my-tasks", "/dashboard/tasks?page=2"])
def test_anonymous_is_sent_to_signin(path):
    assert decide(None, path) == "/signin"


@pytest.mark.parametrize(
    "path",
    [
        "/dashboard/tasks",
        "/dashboard/tasks/12",
        "/dashboard/payments",
        "/dashboard/users",
        "/dashboard/clients",
        "/dashboard/salaries",
        "/dashboard/expenses",
        "/dashboard/dashboard",
    ],
)
def test_user_is_redirected_from_admin_paths(path):
    assert decide(Role.USER, path) == "/dashboard/my-tasks"


@pytest.mark.parametrize(
    "path",
    ["/dashboard/my-tasks", "/dashboard/my-payments", "/dashboard/my-salaries", "/dashboard/profile/"],
)
def test_user_may_open_own_pages(path):
    assert decide(Role.USER, path) is None


def test_user_is_redirected_from_unknown_dashboard_paths():
    assert decide(Role.USER, "/dashboard") == "/dashboard/my-tasks"
    assert decide(Role.USER, "/dashboard/settings") == "/dashboard/my-tasks"


def test_admin_is_unrestricted():
    for path in ("/dashboard", "/dashboard/tasks", "/dashboard/my-tasks", "/dashboard/anything"):
        assert decide(Role.ADMIN, path) is None
