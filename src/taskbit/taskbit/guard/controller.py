from __future__ import annotations

import logging

from flask import Flask, redirect, request

from ..common.web import current_user
from .route_guard import decide, is_guarded

logger = logging.getLogger(__name__)


def register(app: Flask) -> None:
    @app.before_request
    def guard_dashboard():
        if not is_guarded(request.path):
            return None

        user = current_user()
        target = decide(user.role if user else None, request.path)
        if target is None or target == request.path.rstrip("/"):
            return None

        logger.info(
            "Guard redirect %s -> %s (user=%s)",
            request.path,
            target,
            user.user_id if user else "anonymous",
        )
        return redirect(target)
