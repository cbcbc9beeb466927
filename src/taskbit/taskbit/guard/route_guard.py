"""Dashboard route guard.

Decides, from the role claim alone, whether a dashboard path may be served.
No database access: the signed session is the only input.
"""

from __future__ import annotations

from typing import Optional

from ..core.constants import SIGNIN_PATH, USER_HOME_PATH
from ..core.enums import Role

GUARDED_PREFIX = "/dashboard"

ADMIN_ONLY_PREFIXES = (
    "/dashboard/tasks",
    "/dashboard/payments",
    "/dashboard/users",
    "/dashboard/clients",
    "/dashboard/salaries",
    "/dashboard/expenses",
    "/dashboard/dashboard",
)

USER_ALLOWED_PATHS = frozenset(
    {
        "/dashboard/my-tasks",
        "/dashboard/my-payments",
        "/dashboard/my-salaries",
        "/dashboard/profile",
    }
)


def _normalize(path: str) -> str:
    path = (path or "/").split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_guarded(path: str) -> bool:
    return _under(_normalize(path), GUARDED_PREFIX)


def decide(role: Optional[Role], path: str) -> Optional[str]:
    """Return the redirect target for (role, path), or None when the request may proceed."""
    path = _normalize(path)
    if not _under(path, GUARDED_PREFIX):
        return None

    if role is None:
        return SIGNIN_PATH

    if role == Role.ADMIN:
        return None

    if any(_under(path, prefix) for prefix in ADMIN_ONLY_PREFIXES):
        return USER_HOME_PATH
    if path not in USER_ALLOWED_PATHS:
        return USER_HOME_PATH
    return None
