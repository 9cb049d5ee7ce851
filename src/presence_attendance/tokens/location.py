from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..core.exceptions import LocationUnavailableError
from ..geofence.model import Coordinates


class CoordinateProvider(Protocol):
    """Best-effort coordinate source.

    ``locate`` either returns a fix or raises ``LocationUnavailableError``
    with a human-readable reason; it never returns a placeholder.
    """

    def locate(self) -> Coordinates:
        raise NotImplementedError


@dataclass(frozen=True)
class FixedCoordinateProvider:
    """Always reports the same point (browser-supplied fix, tests, kiosks)."""

    lat: float
    lng: float

    def locate(self) -> Coordinates:
        return Coordinates(self.lat, self.lng)


@dataclass(frozen=True)
class UnavailableCoordinateProvider:
    reason: str = "Geolocation not supported"

    def locate(self) -> Coordinates:
        raise LocationUnavailableError(self.reason)
