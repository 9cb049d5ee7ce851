from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import EARTH_RADIUS_M
from ..core.enums import AttendanceStatus
from .model import Campus, Coordinates

logger = logging.getLogger(__name__)


def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in meters between two points."""
    lat1, lng1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lng2 = math.radians(b.lat), math.radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


@dataclass(frozen=True)
class GeofenceDecision:
    status: AttendanceStatus
    distance_m: Optional[float] = None
    skipped: bool = False


class GeofenceEvaluator:
    """Server-side proximity check against a campus radius.

    A holder outside the radius is not rejected: the mark is kept and tagged
    ``out_of_range`` so noisy GPS readings stay auditable.
    """

    def distance(self, holder: Coordinates, campus: Campus | Coordinates) -> float:
        center = campus.center if isinstance(campus, Campus) else campus
        return haversine_distance(holder, center)

    def evaluate(self, holder: Coordinates, campus: Campus, *, dev_mode: bool = False) -> GeofenceDecision:
        if dev_mode:
            return GeofenceDecision(status=AttendanceStatus.PRESENT, skipped=True)

        meters = self.distance(holder, campus)
        if meters > campus.geo_radius_m:
            logger.info(
                "holder %.1fm from campus %s (radius %sm), tagging out_of_range",
                meters,
                campus.campus_id,
                campus.geo_radius_m,
            )
            return GeofenceDecision(status=AttendanceStatus.OUT_OF_RANGE, distance_m=meters)
        return GeofenceDecision(status=AttendanceStatus.PRESENT, distance_m=meters)
