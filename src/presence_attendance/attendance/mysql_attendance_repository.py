from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceFeedRow, AttendanceRecord
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, teacher_id, course_id, section_id, status, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (student_id, teacher_id, course_id, section_id, status.value, created_at, created_at),
            )
            return int(cur.lastrowid)

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
        sql = """
            SELECT a.id, a.student_id, a.teacher_id, a.course_id, a.section_id, a.status, a.created_at,
                   s.student_id AS student_code, u.first_name, u.last_name
            FROM attendance a
            LEFT JOIN students s ON s.user_id = a.student_id
            LEFT JOIN users u ON u.id = a.student_id
            WHERE 1=1
        """
        params: list = []

        if teacher_id is not None:
            sql += " AND a.teacher_id=%s"
            params.append(int(teacher_id))
        if course_id is not None:
            sql += " AND a.course_id=%s"
            params.append(int(course_id))
        if section_id is not None:
            sql += " AND a.section_id=%s"
            params.append(int(section_id))
        if student_id is not None:
            sql += " AND a.student_id=%s"
            params.append(int(student_id))
        if start is not None:
            sql += " AND a.created_at >= %s"
            params.append(start)
        if end is not None:
            sql += " AND a.created_at < %s"
            params.append(end)

        sql += " ORDER BY a.created_at DESC, a.id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            return [
                AttendanceFeedRow(
                    record=AttendanceRecord(
                        attendance_id=int(r["id"]),
                        student_id=int(r["student_id"]),
                        teacher_id=int(r["teacher_id"]),
                        course_id=int(r["course_id"]),
                        section_id=int(r["section_id"]) if r.get("section_id") is not None else None,
                        status=AttendanceStatus(r["status"]),
                        created_at=r["created_at"],
                    ),
                    student_code=r.get("student_code"),
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                )
                for r in rows
            ]
