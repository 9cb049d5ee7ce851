from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_ms
from ..core.exceptions import InvalidPayloadError, NotEnrolledError, RosterNotReadyError, TokenExpiredError
from ..roster.model import RosterEntry
from .model import ScannedPayload, ScanSession

logger = logging.getLogger(__name__)


def parse_scanned_payload(raw: str) -> ScannedPayload:
    """Structural check: the payload must yield a holder id.

    Non-JSON text is accepted as a bare holder id, so printed student-code
    symbols still scan.
    """
    text = (raw or "").strip()
    if not text:
        raise InvalidPayloadError("Invalid QR payload")

    try:
        data: Any = json.loads(text)
    except ValueError:
        data = {"student_id": text}

    if not isinstance(data, dict):
        # JSON scalars such as "12345" or 12345
        data = {"student_id": data}

    holder_id = data.get("student_id")
    if holder_id in (None, ""):
        holder_id = data.get("id")
    if holder_id in (None, "") or isinstance(holder_id, (dict, list, bool)):
        raise InvalidPayloadError("Invalid QR payload")

    return ScannedPayload(raw=text, data=data, holder_id=str(holder_id).strip())


class ValidationPipeline:
    """Operator-side checks on a decoded payload.

    Order: structure, expiry, roster membership. The first failure raises;
    nothing here touches persisted state. Proximity is left to the server.
    """

    def __init__(self, *, clock: Callable[[], int] = now_ms):
        self._clock = clock

    def validate(self, raw: str, roster: Optional[Sequence[RosterEntry]]) -> ScanSession:
        payload = parse_scanned_payload(raw)
        now = self._clock()

        expires_at = payload.expires_at
        if expires_at is not None and now > expires_at:
            raise TokenExpiredError(expires_at, now)
        if expires_at is None and "expires_at" in payload.data:
            raise InvalidPayloadError("Invalid QR payload")

        if roster is None:
            raise RosterNotReadyError()

        matched = self.match(payload.holder_id, roster)
        if matched is None:
            raise NotEnrolledError(payload.holder_id)

        logger.debug("payload for %s passed client checks", payload.holder_id)
        return ScanSession(payload=payload, scan_time=now, matched_entry=matched)

    @staticmethod
    def match(holder_id: str, roster: Sequence[RosterEntry]) -> Optional[RosterEntry]:
        for entry in roster:
            if entry.matches(holder_id):
                return entry
        return None
