from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from presence_attendance.attendance.model import AttendanceFeedRow, AttendanceRecord
from presence_attendance.core.enums import AttendanceStatus, Role
from presence_attendance.geofence.model import Campus
from presence_attendance.roster.model import RosterEntry
from presence_attendance.users.model import User

# 2023-11-14 22:13:20 UTC
FIXED_NOW_MS = 1_700_000_000_000

MANILA = (14.5995, 120.9842)


@dataclass
class InMemoryUsers:
    users_by_id: dict[int, User] = field(default_factory=dict)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self.users_by_id.values():
            if user.username == username:
                return user
        return None


@dataclass
class InMemoryCampuses:
    campuses: dict[int, Campus] = field(default_factory=dict)

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        return self.campuses.get(campus_id)


@dataclass
class InMemoryRoster:
    entries: list[RosterEntry] = field(default_factory=list)

    def list_for_section(self, section_id: int, *, year_level: Optional[int] = None):
        return [
            e
            for e in self.entries
            if e.section_id == section_id and (year_level is None or e.year_level == year_level)
        ]


class InMemoryAttendance:
    def __init__(self, codes: Optional[dict[int, tuple[str, str, str]]] = None):
        self.records: list[AttendanceRecord] = []
        self._codes = codes or {}
        self._id = 0

    def create(self, *, student_id, teacher_id, course_id, section_id, status, created_at) -> int:
        self._id += 1
        self.records.append(
            AttendanceRecord(
                attendance_id=self._id,
                student_id=student_id,
                teacher_id=teacher_id,
                course_id=course_id,
                section_id=section_id,
                status=status,
                created_at=created_at,
            )
        )
        return self._id

    def list_feed(
        self,
        *,
        teacher_id=None,
        course_id=None,
        section_id=None,
        student_id=None,
        start=None,
        end=None,
        limit=None,
    ):
        items = [
            r
            for r in self.records
            if (teacher_id is None or r.teacher_id == teacher_id)
            and (course_id is None or r.course_id == course_id)
            and (section_id is None or r.section_id == section_id)
            and (student_id is None or r.student_id == student_id)
            and (start is None or r.created_at >= start)
            and (end is None or r.created_at < end)
        ]
        items.sort(key=lambda r: (r.created_at, r.attendance_id), reverse=True)
        if limit is not None:
            items = items[:limit]

        rows = []
        for r in items:
            code, first, last = self._codes.get(r.student_id, (None, None, None))
            rows.append(AttendanceFeedRow(record=r, student_code=code, first_name=first, last_name=last))
        return rows


@pytest.fixture
def fixed_now_ms() -> int:
    return FIXED_NOW_MS


@pytest.fixture
def campus() -> Campus:
    return Campus(campus_id=1, name="Main Campus", latitude=MANILA[0], longitude=MANILA[1], geo_radius_m=50, address="Manila")


@pytest.fixture
def roster_entries() -> list[RosterEntry]:
    return [
        RosterEntry(db_id=3, user_id=7, student_code="2024-001", section_id=5, year_level=1, name="Ana Cruz"),
        RosterEntry(db_id=4, user_id=8, student_code="2024-002", section_id=5, year_level=1, name="Ben Reyes"),
        RosterEntry(db_id=9, user_id=12, student_code="2024-100", section_id=6, year_level=2, name="Carl Lim"),
    ]


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        users_by_id={
            2: User(2, "Tess", "Teacher", "teacher", generate_password_hash("teacher123"), Role.TEACHER),
            7: User(7, "Ana", "Cruz", "ana", generate_password_hash("student123"), Role.STUDENT),
            20: User(20, "Old", "Account", "old", generate_password_hash("old123"), Role.STUDENT, is_active=False),
        }
    )


@pytest.fixture
def campus_repo(campus) -> InMemoryCampuses:
    return InMemoryCampuses({campus.campus_id: campus})


@pytest.fixture
def roster_repo(roster_entries) -> InMemoryRoster:
    return InMemoryRoster(list(roster_entries))


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance(codes={7: ("2024-001", "Ana", "Cruz"), 8: ("2024-002", "Ben", "Reyes")})


@pytest.fixture
def school_day() -> date:
    return date(2026, 10, 19)


@pytest.fixture
def morning(school_day) -> datetime:
    return datetime.combine(school_day, datetime.min.time()).replace(hour=8, minute=5)
