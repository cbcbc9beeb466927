import os

from .base import LOGS_DIR, build_logging_config, db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

DEBUG = False

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "30"))
SESSION_COOKIE_SECURE = env_flag("SESSION_COOKIE_SECURE", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = build_logging_config(LOG_LEVEL, os.path.join(LOGS_DIR, "taskbit.log"))

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
