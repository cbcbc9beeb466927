import os

from .base import LOGS_DIR, build_logging_config, db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env(default_password="root")

DEBUG = True

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOGGING = build_logging_config(LOG_LEVEL, os.path.join(LOGS_DIR, "taskbit.log"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
