from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    STAFF = "staff"


class CheckinStatus(str, Enum):
    """Check-in status stored with the day's attendance record."""

    ON_TIME = "OnTime"
    LATE = "Late"
    REMOTE = "Remote"


class Mood(str, Enum):
    GREAT = "Great"
    GOOD = "Good"
    OKAY = "Okay"
    TIRED = "Tired"
    STRESSED = "Stressed"


class AttendanceState(str, Enum):
    """Where a staff member is in today's attendance lifecycle."""

    NOT_CHECKED_IN = "NotCheckedIn"
    CHECKED_IN = "CheckedIn"
    CHECKED_OUT = "CheckedOut"


class TransitionAction(str, Enum):
    CHECK_IN = "in"
    CHECK_OUT = "out"


class Severity(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
