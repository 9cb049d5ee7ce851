from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_GEO_RADIUS_M
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Campus
from .repository import CampusRepository


class MySQLCampusRepository(CampusRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, address, latitude, longitude, geo_radius_m
                FROM campus
                WHERE id=%s
                """,
                (int(campus_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Campus(
                campus_id=int(r["id"]),
                name=r["name"],
                address=r.get("address"),
                latitude=float(r["latitude"] or 0),
                longitude=float(r["longitude"] or 0),
                geo_radius_m=int(r["geo_radius_m"] if r["geo_radius_m"] is not None else DEFAULT_GEO_RADIUS_M),
            )
