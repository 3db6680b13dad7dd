from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the remote document."""

    PRESENT = "present"
    ABSENT = "absent"


class SessionState(str, Enum):
    """Diagnostic label describing where "now" falls relative to a session."""

    NOT_FOUND = "Session not found"
    DIFFERENT_DATE = "Session is on a different date"
    NOT_STARTED = "Session has not started yet"
    ENDED = "Session has ended"
    ACTIVE = "Session is active"
