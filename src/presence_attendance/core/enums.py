from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance outcome persisted in the database."""

    PRESENT = "present"
    OUT_OF_RANGE = "out_of_range"


class ScanState(str, Enum):
    """States of the operator-side scanner."""

    IDLE = "idle"
    SCANNING = "scanning"
    DECODED = "decoded"
    VALIDATING = "validating"
    CONFIRMING = "confirming"
    MARKED = "marked"
