from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..database.mysql_base import day_bounds
from .model import AttendanceFeedRow
from .repository import AttendanceRepository


class AttendanceFeed:
    """Read side of attendance. No method here writes."""

    def __init__(self, attendance: AttendanceRepository, *, today: Callable[[], date] = lambda: now_local().date()):
        self._attendance = attendance
        self._today = today

    def today(
        self,
        teacher_id: int,
        course_id: int,
        section_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Sequence[AttendanceFeedRow]:
        start, end = day_bounds(day or self._today())
        return self._attendance.list_feed(
            teacher_id=teacher_id,
            course_id=course_id,
            section_id=section_id,
            start=start,
            end=end,
        )

    def for_course(
        self,
        course_id: int,
        *,
        teacher_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Sequence[AttendanceFeedRow]:
        start = end = None
        if day is not None:
            start, end = day_bounds(day)
        return self._attendance.list_feed(course_id=course_id, teacher_id=teacher_id, start=start, end=end)

    def for_student(self, student_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceFeedRow]:
        return self._attendance.list_feed(student_id=student_id, limit=limit)
