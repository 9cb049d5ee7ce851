from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import RosterEntry
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_section(self, section_id: int, *, year_level: Optional[int] = None) -> Sequence[RosterEntry]:
        sql = """
            SELECT s.id, s.user_id, s.student_id, s.section_id, s.year_level, s.status,
                   u.first_name, u.last_name
            FROM students s
            LEFT JOIN users u ON u.id = s.user_id
            WHERE s.section_id=%s
        """
        params: list = [int(section_id)]
        if year_level is not None:
            sql += " AND s.year_level=%s"
            params.append(int(year_level))
        sql += " ORDER BY u.last_name, u.first_name"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [RosterEntry.from_dict(r) for r in fetchall(cur)]
