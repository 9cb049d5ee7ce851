from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..common.datetime_utils import ms_to_datetime
from ..geofence.model import Coordinates
from ..roster.model import RosterEntry


@dataclass(frozen=True)
class ScannedPayload:
    """A decoded QR payload after the structural check."""

    raw: str
    data: dict[str, Any]
    holder_id: str

    @property
    def expires_at(self) -> Optional[int]:
        value = self.data.get("expires_at")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError, OverflowError):
            return None

    @property
    def location(self) -> Optional[Coordinates]:
        return Coordinates.from_dict(self.data.get("location"))


@dataclass
class ScanSession:
    """Scanner-local state for one provisional scan, destroyed on mark or cancel."""

    payload: ScannedPayload
    scan_time: int
    matched_entry: Optional[RosterEntry] = None
    notes: list[str] = field(default_factory=list)

    @property
    def student_id(self) -> str:
        return self.payload.holder_id

    def summary(self) -> dict[str, Any]:
        expires_at = self.payload.expires_at
        location = self.payload.location
        return {
            "valid": True,
            "reason": "QR code is valid and ready to mark",
            "student_id": self.student_id,
            "is_enrolled": self.matched_entry is not None,
            "student": self.matched_entry.to_dict() if self.matched_entry else None,
            "location": location.to_dict() if location else None,
            "expires_at": expires_at,
            "expires_at_local": ms_to_datetime(expires_at).strftime("%H:%M:%S") if expires_at else None,
        }

    def mark_body(
        self,
        *,
        teacher_id: int,
        course_id: int,
        section_id: Optional[int],
        campus_id: int,
        teacher_location: Optional[Coordinates] = None,
        dev_mode: bool = False,
    ) -> dict[str, Any]:
        """Request body for ``POST /api/attendance/mark``."""
        return {
            "student_id": self.student_id,
            "teacher_id": teacher_id,
            "course_id": course_id,
            "section_id": section_id,
            "campus_id": campus_id,
            "qr_payload": self.payload.data,
            "teacher_location": teacher_location.to_dict() if teacher_location else None,
            "dev_mode": bool(dev_mode),
        }

