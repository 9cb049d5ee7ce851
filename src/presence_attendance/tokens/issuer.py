from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..common.datetime_utils import format_countdown, now_ms
from ..core.constants import TOKEN_TTL_SECONDS
from ..core.exceptions import LocationUnavailableError
from ..geofence.model import Coordinates
from .location import CoordinateProvider
from .model import AttendanceToken, HolderId

logger = logging.getLogger(__name__)


class TokenIssuer:
    """Mints attendance tokens on the holder device.

    Issuance never waits for a location fix: when the provider has none the
    token carries ``{0, 0}`` and ``location_error`` explains why.
    """

    def __init__(self, *, ttl_seconds: int = TOKEN_TTL_SECONDS, clock: Callable[[], int] = now_ms):
        self._ttl_ms = int(ttl_seconds) * 1000
        self._clock = clock
        self.location_error: Optional[str] = None

    def issue(self, holder_id: HolderId, coordinate_provider: CoordinateProvider) -> AttendanceToken:
        try:
            location = coordinate_provider.locate()
            self.location_error = None
        except LocationUnavailableError as e:
            location = Coordinates.origin()
            self.location_error = f"Location error: {e}"
            logger.warning("issuing token for %s without location: %s", holder_id, e)

        return AttendanceToken.mint(holder_id, issued_at=self._clock(), location=location, ttl_ms=self._ttl_ms)


class RotatingTokenIssuer:
    """Keeps a current token and a one-second countdown.

    At zero the token is reissued with fresh timestamps and location;
    ``regenerate`` does the same immediately. ``start`` runs the countdown on
    a daemon thread which ``close`` cancels.
    """

    def __init__(
        self,
        holder_id: HolderId,
        coordinate_provider: CoordinateProvider,
        *,
        issuer: Optional[TokenIssuer] = None,
        ttl_seconds: int = TOKEN_TTL_SECONDS,
        on_rotate: Optional[Callable[[AttendanceToken], None]] = None,
    ):
        self._holder_id = holder_id
        self._provider = coordinate_provider
        self._issuer = issuer or TokenIssuer(ttl_seconds=ttl_seconds)
        self._ttl_seconds = int(ttl_seconds)
        self._on_rotate = on_rotate

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._token = self._issuer.issue(self._holder_id, self._provider)
        self._remaining = self._ttl_seconds

    @property
    def token(self) -> AttendanceToken:
        with self._lock:
            return self._token

    @property
    def seconds_remaining(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def countdown(self) -> str:
        return format_countdown(self.seconds_remaining)

    @property
    def location_error(self) -> Optional[str]:
        return self._issuer.location_error

    def tick(self) -> AttendanceToken:
        """Advance the countdown by one second, reissuing at zero."""
        with self._lock:
            if self._remaining <= 1:
                self._rotate_locked()
            else:
                self._remaining -= 1
            token = self._token
        return token

    def regenerate(self) -> AttendanceToken:
        with self._lock:
            self._rotate_locked()
            return self._token

    def _rotate_locked(self) -> None:
        self._token = self._issuer.issue(self._holder_id, self._provider)
        self._remaining = self._ttl_seconds
        logger.debug("rotated token for %s, expires_at=%s", self._holder_id, self._token.expires_at)
        if self._on_rotate:
            self._on_rotate(self._token)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="token-countdown", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(1.0):
            self.tick()

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    def __enter__(self) -> "RotatingTokenIssuer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
