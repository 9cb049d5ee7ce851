from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local, now_ms
from ..common.validators import optional_int, require_int
from ..core.enums import AttendanceStatus
from ..core.exceptions import DevModeDisabledError, InvalidPayloadError, TokenExpiredError, ValidationError
from ..geofence.evaluator import GeofenceEvaluator
from ..geofence.repository import CampusRepository
from ..tokens.model import AttendanceToken
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkCommand:
    """Parsed body of a mark request."""

    student_id: int
    teacher_id: int
    course_id: int
    section_id: Optional[int]
    campus_id: int
    qr_payload: Any
    dev_mode: bool = False

    @classmethod
    def from_request(cls, data: Any) -> "MarkCommand":
        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON payload")

        required = ("student_id", "teacher_id", "course_id", "campus_id")
        if any(data.get(k) in (None, "", 0) for k in required):
            raise ValidationError("Missing required fields: " + ", ".join(required))

        return cls(
            student_id=require_int(data.get("student_id"), "student_id"),
            teacher_id=require_int(data.get("teacher_id"), "teacher_id"),
            course_id=require_int(data.get("course_id"), "course_id"),
            section_id=optional_int(data.get("section_id"), "section_id"),
            campus_id=require_int(data.get("campus_id"), "campus_id"),
            qr_payload=data.get("qr_payload"),
            dev_mode=data.get("dev_mode") is True,
        )


class AttendanceRecorder:
    """Authoritative mark: re-validates the token, applies the geofence, appends a record.

    Nothing the scanner concluded is trusted; expiry and structure are checked
    again here. Each call writes a new row, so a still-valid token replayed
    for the same course produces another record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        campuses: CampusRepository,
        *,
        evaluator: Optional[GeofenceEvaluator] = None,
        allow_dev_mode: bool = False,
        clock_ms: Callable[[], int] = now_ms,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._campuses = campuses
        self._evaluator = evaluator or GeofenceEvaluator()
        self._allow_dev_mode = bool(allow_dev_mode)
        self._clock_ms = clock_ms
        self._clock = clock

    def mark(
        self,
        holder_id: int,
        teacher_id: int,
        course_id: int,
        section_id: Optional[int],
        campus_id: int,
        token_payload: Any,
        *,
        dev_mode: bool = False,
    ) -> AttendanceRecord:
        if dev_mode and not self._allow_dev_mode:
            raise DevModeDisabledError("Dev mode is disabled on this server")

        token = AttendanceToken.from_payload(token_payload)

        now = self._clock_ms()
        if token.is_expired(now):
            raise TokenExpiredError(token.expires_at, now)

        if str(token.holder_id).strip() != str(holder_id):
            raise InvalidPayloadError("QR payload does not belong to this student")

        status = self._status_for(token, campus_id, dev_mode=dev_mode)

        created_at = self._clock()
        attendance_id = self._attendance.create(
            student_id=int(holder_id),
            teacher_id=int(teacher_id),
            course_id=int(course_id),
            section_id=section_id,
            status=status,
            created_at=created_at,
        )
        logger.info(
            "attendance %s: student=%s course=%s section=%s status=%s dev_mode=%s",
            attendance_id,
            holder_id,
            course_id,
            section_id,
            status.value,
            dev_mode,
        )
        return AttendanceRecord(
            attendance_id=attendance_id,
            student_id=int(holder_id),
            teacher_id=int(teacher_id),
            course_id=int(course_id),
            section_id=section_id,
            status=status,
            created_at=created_at,
        )

    def mark_request(self, data: Any) -> AttendanceRecord:
        cmd = MarkCommand.from_request(data)
        return self.mark(
            cmd.student_id,
            cmd.teacher_id,
            cmd.course_id,
            cmd.section_id,
            cmd.campus_id,
            cmd.qr_payload,
            dev_mode=cmd.dev_mode,
        )

    def _status_for(self, token: AttendanceToken, campus_id: int, *, dev_mode: bool) -> AttendanceStatus:
        if dev_mode:
            return AttendanceStatus.PRESENT
        if token.location is None:
            return AttendanceStatus.PRESENT

        campus = self._campuses.get_by_id(campus_id)
        if campus is None:
            logger.warning("campus %s not found, skipping proximity check", campus_id)
            return AttendanceStatus.PRESENT

        return self._evaluator.evaluate(token.location, campus).status
