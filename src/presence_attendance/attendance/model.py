from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one append-only attendance mark."""

    attendance_id: int
    student_id: int
    teacher_id: int
    course_id: int
    section_id: Optional[int]
    status: AttendanceStatus
    created_at: datetime


@dataclass(frozen=True)
class AttendanceFeedRow:
    """Read-model for the attendance feed (record plus joined display fields)."""

    record: AttendanceRecord
    student_code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        r = self.record
        return {
            "id": r.attendance_id,
            "student_id": r.student_id,
            "teacher_id": r.teacher_id,
            "course_id": r.course_id,
            "section_id": r.section_id,
            "status": r.status.value,
            "created_at": r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "student_code": self.student_code,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


@dataclass(frozen=True)
class MarkResult:
    """Server answer to a mark request."""

    success: bool
    attendance_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    timestamp: Optional[str] = None
    message: str = ""

    @classmethod
    def from_record(cls, record: AttendanceRecord) -> "MarkResult":
        return cls(
            success=True,
            attendance_id=record.attendance_id,
            status=record.status,
            timestamp=record.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            message="Attendance marked successfully",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "attendance_id": self.attendance_id,
            "status": self.status.value if self.status else None,
            "timestamp": self.timestamp,
        }
