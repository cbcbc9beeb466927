"""Flask helpers shared by controllers: session access, role decorators, JSON envelopes."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Iterable, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    NotFoundError,
    ValidationError,
)
from ..users.service import SessionUser
from .serialization import to_json

logger = logging.getLogger(__name__)

SESSION_KEY = "user"
ACCESS_DENIED = "Access Denied"
GENERIC_FAILURE = "An unexpected error occurred"


def current_user() -> Optional[SessionUser]:
    data = session.get(SESSION_KEY)
    if not data:
        return None
    return SessionUser.from_session(data)


def store_user(user: SessionUser) -> None:
    session.clear()
    session.permanent = True
    session[SESSION_KEY] = user.to_session()


def request_data() -> dict:
    """JSON body or form fields, whichever the client sent."""
    if request.is_json:
        return dict(request.get_json(silent=True) or {})
    return request.form.to_dict()


def ok(message: str = "", *, data=None, invalidate: Iterable[str] = (), status: int = 200):
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = to_json(data)
    invalidate = list(invalidate)
    if invalidate:
        body["invalidate"] = invalidate
    return jsonify(body), status


def fail(code: str, message: str, status: int, *, data=None):
    body = {"success": False, "error": code, "message": message}
    if data is not None:
        body["data"] = to_json(data)
    return jsonify(body), status


def access_denied():
    return fail(AuthorizationError.code, ACCESS_DENIED, 403)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return fail("UNAUTHENTICATED", "Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return fail("UNAUTHENTICATED", "Please sign in to continue", 401)
        if user.role != Role.ADMIN:
            logger.warning("User %s denied admin endpoint %s", user.user_id, request.path)
            return access_denied()
        return view(*args, **kwargs)

    return wrapper


def handle_errors(view):
    """Map domain errors to JSON responses; log and hide everything else."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return fail(e.code, str(e), 400)
        except BusinessRuleError as e:
            logger.info("Rejected %s %s: %s", request.method, request.path, e)
            remaining = getattr(e, "remaining", None)
            return fail(e.code, str(e), 409, data={"remaining": remaining} if remaining is not None else None)
        except AuthenticationError as e:
            return fail(e.code, str(e), 401)
        except (AuthorizationError, NotFoundError) as e:
            logger.info("Access denied on %s %s: %s", request.method, request.path, e)
            return access_denied()
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return fail("INTERNAL_SERVER_ERROR", GENERIC_FAILURE, 500)

    return wrapper


def page_response(page):
    """`{data, meta}` listing envelope."""
    return jsonify(to_json(page.to_dict()))
