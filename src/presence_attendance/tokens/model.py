from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..core.constants import TOKEN_TTL_MS, TOKEN_TYPE
from ..core.exceptions import InvalidPayloadError
from ..geofence.model import Coordinates

HolderId = Union[int, str]


@dataclass(frozen=True)
class AttendanceToken:
    """Time-boxed, holder-identifying payload rendered into the QR symbol.

    Tokens are never mutated; the issuer replaces them on expiry or manual
    regeneration. ``expires_at`` is always ``issued_at + TOKEN_TTL_MS`` for
    tokens minted here.
    """

    holder_id: HolderId
    issued_at: int
    expires_at: int
    location: Optional[Coordinates] = None

    @classmethod
    def mint(cls, holder_id: HolderId, *, issued_at: int, location: Coordinates, ttl_ms: int = TOKEN_TTL_MS) -> "AttendanceToken":
        return cls(holder_id=holder_id, issued_at=int(issued_at), expires_at=int(issued_at) + int(ttl_ms), location=location)

    def is_expired(self, now_ms: int) -> bool:
        return int(now_ms) > self.expires_at

    def to_payload(self) -> dict[str, Any]:
        location = self.location or Coordinates.origin()
        return {
            "type": TOKEN_TYPE,
            "student_id": self.holder_id,
            "ts": self.issued_at,
            "location": location.to_dict(),
            "expires_at": self.expires_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))

    @classmethod
    def from_payload(cls, payload: Any) -> "AttendanceToken":
        """Strict parse of the wire format, as done server-side."""
        if not isinstance(payload, dict):
            raise InvalidPayloadError("Invalid QR payload structure")
        if payload.get("type") != TOKEN_TYPE or payload.get("expires_at") is None:
            raise InvalidPayloadError("Invalid QR payload structure")

        holder_id = payload.get("student_id", payload.get("id"))
        if holder_id is None or holder_id == "":
            raise InvalidPayloadError("QR payload has no student id")

        try:
            expires_at = int(payload["expires_at"])
            issued_at = int(payload["ts"]) if payload.get("ts") is not None else expires_at - TOKEN_TTL_MS
        except (TypeError, ValueError, OverflowError):
            raise InvalidPayloadError("QR payload timestamps are not numeric")

        return cls(
            holder_id=holder_id,
            issued_at=issued_at,
            expires_at=expires_at,
            location=Coordinates.from_dict(payload.get("location")),
        )
