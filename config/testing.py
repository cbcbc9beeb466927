import os

from .base import build_logging_config, db_config_from_env, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_password="root")

DEBUG = False
TESTING = True

SESSION_DAYS = 30

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOGGING = build_logging_config(LOG_LEVEL)

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
