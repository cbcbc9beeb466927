from __future__ import annotations

import importlib
import logging
import logging.config
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import fail
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .expenses.controller import register as register_expenses
from .guard.controller import register as register_guard
from .payments.controller import register as register_payments
from .salaries.controller import register as register_salaries
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=PROJECT_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=PROJECT_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("Demo seed ready")


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory. Pass a prebuilt `container` to skip MySQL wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging_config = getattr(settings, "LOGGING", None)
    if logging_config:
        logging.config.dictConfig(logging_config)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(
        days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    )
    # Sliding expiry: the cookie is re-issued on every request.
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = bool(getattr(settings, "SESSION_COOKIE_SECURE", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config)

    logger.info("Starting taskbit with settings=%s", settings_module)

    register_guard(app)
    register_users(app, container)
    register_tasks(app, container)
    register_payments(app, container)
    register_salaries(app, container)
    register_expenses(app, container)
    register_dashboard(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return fail("NOT_FOUND", "Page not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return fail("METHOD_NOT_ALLOWED", "Method not allowed", 405)

    return app
