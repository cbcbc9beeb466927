from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_user, handle_errors, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/dashboard", endpoint="admin_dashboard")
    @admin_required
    @handle_errors
    def admin_dashboard():
        return ok(data=container.dashboard_service.summary(current_role=current_user().role, args=request.args))
