"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
DEFAULT_ASSIGNMENTS_PAGE_SIZE = 50
DEFAULT_ADMIN_ATTENDANCE_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200

SETTINGS_SINGLETON_ID = 1

MAX_LATE_THRESHOLD_MINUTES = 120
MAX_GRACE_PERIOD_MINUTES = 60
