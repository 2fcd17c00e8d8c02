"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
MIN_PASSWORD_LENGTH = 6
DEFAULT_LIST_LIMIT = 500

# Landing routes resolved after sign-in.
ROUTE_PENDING_APPROVAL = "/pending-approval"
ROUTE_ADMIN_HOME = "/admin/students"
ROUTE_STAFF_HOME = "/staff/my-card"
ROUTE_STUDENT_HOME = "/student/my-card"
