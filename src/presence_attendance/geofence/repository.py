from __future__ import annotations

from typing import Optional, Protocol

from .model import Campus


class CampusRepository(Protocol):
    """Read-only access to campus geofence configuration."""

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        raise NotImplementedError
