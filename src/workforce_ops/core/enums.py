from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in the session by the upstream login."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Attendance status stored with the daily record."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"


class AttendanceState(str, Enum):
    """Position of a (employee, day) pair in the check-in/check-out lifecycle."""

    NO_RECORD = "no_record"
    AWAITING_CHECK_IN = "awaiting_check_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CHECK_OUT_REVOKED = "check_out_revoked"
    CHECK_IN_REVOKED = "check_in_revoked"


class AttendanceAction(str, Enum):
    CHECK_IN = "check_in"
    UNDO_CHECK_IN = "undo_check_in"
    CHECK_OUT = "check_out"
    UNDO_CHECK_OUT = "undo_check_out"


class AssignmentStatus(str, Enum):
    """Reconciled state of a daily product assignment."""

    ASSIGNED = "assigned"
    PARTIALLY_SOLD = "partially_sold"
    SOLD = "sold"
    EXPIRED = "expired"


class NotificationAudience(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    USER = "user"
