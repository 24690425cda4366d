"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_ACTIVITY_LIMIT = 10
MAX_ACTIVITY_LIMIT = 100
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 15
