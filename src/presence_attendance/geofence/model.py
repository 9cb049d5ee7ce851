from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import optional_float


@dataclass(frozen=True)
class Coordinates:
    """A WGS84 point in decimal degrees."""

    lat: float
    lng: float

    @classmethod
    def origin(cls) -> "Coordinates":
        return cls(0.0, 0.0)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["Coordinates"]:
        if not isinstance(data, dict):
            return None
        return cls(lat=optional_float(data.get("lat")), lng=optional_float(data.get("lng")))

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Campus:
    """Admin-managed campus geofence. Read-only here."""

    campus_id: int
    name: str
    latitude: float
    longitude: float
    geo_radius_m: int
    address: Optional[str] = None

    @property
    def center(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.campus_id,
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "geo_radius_m": self.geo_radius_m,
        }
