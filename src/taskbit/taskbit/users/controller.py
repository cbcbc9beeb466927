from __future__ import annotations

import logging

from flask import Flask, redirect, request, session

from ..common.invalidation import PROFILE_GROUPS, USER_GROUPS
from ..common.listing import ListQuery
from ..common.web import (
    access_denied,
    admin_required,
    current_user,
    fail,
    handle_errors,
    login_required,
    ok,
    page_response,
    request_data,
    store_user,
)
from ..container import Container
from ..core.constants import ADMIN_HOME_PATH, DENIED_PATH, SIGNIN_PATH, USER_HOME_PATH
from ..core.enums import Role, UserStatus
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def _home_for(role: Role) -> str:
    return ADMIN_HOME_PATH if role == Role.ADMIN else USER_HOME_PATH


def register(app: Flask, container: Container) -> None:
    @app.route(SIGNIN_PATH, methods=["GET", "POST"], endpoint="signin")
    def signin():
        user = current_user()
        if request.method == "GET":
            if user:
                return redirect(_home_for(user.role))
            return ok("Sign in with email and password", data={"fields": ["email", "password", "role"]})

        data = request_data()
        # The role selector on the form is cosmetic; the stored profile decides.
        email = data.get("email", "")
        try:
            s_user = container.auth_service.authenticate(email, data.get("password", ""))
        except AuthenticationError as e:
            logger.info("Failed sign-in for %r", email)
            session.clear()
            return fail(e.code, str(e), 401)
        except Exception:
            logger.exception("Sign-in failed unexpectedly")
            session.clear()
            return fail("INTERNAL_SERVER_ERROR", "An unexpected error occurred", 500)

        store_user(s_user)
        logger.info("User %s signed in as %s", s_user.user_id, s_user.role.value)
        return ok("Signed in", data={"user": s_user.to_session(), "redirect": _home_for(s_user.role)})

    @app.route("/signout", endpoint="signout")
    def signout():
        session.clear()
        return redirect(SIGNIN_PATH)

    @app.route(DENIED_PATH, endpoint="denied")
    def denied():
        return access_denied()

    @app.route("/dashboard", endpoint="dashboard_home")
    def dashboard_home():
        user = current_user()
        return redirect(_home_for(user.role) if user else SIGNIN_PATH)

    @app.route("/dashboard/users", endpoint="admin_users")
    @admin_required
    @handle_errors
    def admin_users():
        query = ListQuery.from_args(request.args, status_enum=UserStatus)
        return page_response(container.user_service.list_users(query))

    @app.route("/dashboard/profile", endpoint="profile")
    @login_required
    @handle_errors
    def profile():
        return ok(data=container.user_service.get_profile(current_user().user_id))

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @admin_required
    @handle_errors
    def create_user():
        user_id = container.user_service.create_user(current_role=current_user().role, data=request_data())
        return ok("User registered successfully", data={"id": user_id}, invalidate=USER_GROUPS, status=201)

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @admin_required
    @handle_errors
    def update_user(user_id: int):
        container.user_service.update_user(current_role=current_user().role, user_id=user_id, data=request_data())
        return ok("User updated successfully", invalidate=USER_GROUPS)

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @admin_required
    @handle_errors
    def delete_user(user_id: int):
        me = current_user()
        container.user_service.delete_user(current_role=me.role, current_user_id=me.user_id, user_id=user_id)
        return ok("User deleted successfully", invalidate=USER_GROUPS)

    @app.route("/api/users/search", endpoint="search_users")
    @admin_required
    @handle_errors
    def search_users():
        return ok(data=container.user_service.search_users(request.args.get("q", "")))

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    @handle_errors
    def update_profile():
        me = current_user()
        refreshed = container.user_service.update_profile(user_id=me.user_id, data=request_data())
        store_user(refreshed)
        return ok("Profile updated successfully", data=refreshed.to_session(), invalidate=PROFILE_GROUPS)
