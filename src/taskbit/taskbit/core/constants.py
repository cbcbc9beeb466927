"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 30
PAGE_SIZE = 10
USER_SEARCH_LIMIT = 10
MIN_TITLE_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

SIGNIN_PATH = "/signin"
DENIED_PATH = "/denied"
USER_HOME_PATH = "/dashboard/my-tasks"
ADMIN_HOME_PATH = "/dashboard/dashboard"

# Highest year a month/year filter accepts; the range end must still be a valid date.
MAX_FILTER_YEAR = 9998
