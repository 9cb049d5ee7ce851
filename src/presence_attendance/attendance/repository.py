from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceFeedRow


class AttendanceRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        teacher_id: int,
        course_id: int,
        section_id: Optional[int],
        status: AttendanceStatus,
        created_at: datetime,
    ) -> int:
        """Append one record. No uniqueness is enforced on any column tuple."""

        raise NotImplementedError

    def list_feed(
        self,
        *,
        teacher_id: Optional[int] = None,
        course_id: Optional[int] = None,
        section_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceFeedRow]:
        """Records matching every given filter, newest first; ``[start, end)`` on created_at."""

        raise NotImplementedError
