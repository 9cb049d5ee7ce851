from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_SCAN_FPS
from ..core.enums import ScanState
from ..core.exceptions import CameraUnavailableError, DecodeError, DomainError, ValidationError
from ..roster.model import RosterEntry
from ..validation.model import ScanSession
from ..validation.pipeline import ValidationPipeline
from .decoder import Decoder, QRDecoder
from .frame_source import FrameSource
from .image_fallback import ImageInput, decode_image

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSITIONS: dict[ScanState, frozenset[ScanState]] = {
    ScanState.IDLE: frozenset({ScanState.SCANNING, ScanState.DECODED}),
    ScanState.SCANNING: frozenset({ScanState.DECODED, ScanState.IDLE}),
    ScanState.DECODED: frozenset({ScanState.VALIDATING, ScanState.IDLE}),
    ScanState.VALIDATING: frozenset({ScanState.CONFIRMING, ScanState.IDLE}),
    ScanState.CONFIRMING: frozenset({ScanState.MARKED, ScanState.IDLE}),
    ScanState.MARKED: frozenset({ScanState.SCANNING, ScanState.DECODED, ScanState.IDLE}),
}


@dataclass(frozen=True)
class ScanNotice:
    """Transient operator message. Never persisted."""

    level: str
    message: str
    error: Optional[DomainError] = None


class ScannerLoop:
    """Operator-side camera scanner as an explicit state machine.

    IDLE -> SCANNING -> DECODED -> VALIDATING -> CONFIRMING -> MARKED

    Each ``tick`` grabs one frame and tries to decode it. The camera is
    released as soon as a symbol decodes, before validation runs, so a second
    decode can never race the first into a mark. A passing scan waits in
    CONFIRMING until ``confirm`` or ``cancel``.
    """

    def __init__(
        self,
        frames: FrameSource,
        pipeline: ValidationPipeline,
        roster: Callable[[], Optional[Sequence[RosterEntry]]],
        *,
        decoder: Optional[Decoder] = None,
        fps: int = DEFAULT_SCAN_FPS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_notice: Optional[Callable[[ScanNotice], None]] = None,
    ):
        self._frames = frames
        self._pipeline = pipeline
        self._roster = roster
        self._decoder = decoder or QRDecoder()
        self._frame_interval = 1.0 / max(1, int(fps))
        self._clock = clock
        self._sleep = sleep
        self._on_notice = on_notice

        self._state = ScanState.IDLE
        self._session: Optional[ScanSession] = None
        self.notice: Optional[ScanNotice] = None

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    def _transition(self, to: ScanState) -> None:
        if to not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"illegal scanner transition {self._state.value} -> {to.value}")
        logger.debug("scanner %s -> %s", self._state.value, to.value)
        self._state = to

    def _notify(self, level: str, message: str, error: Optional[DomainError] = None) -> None:
        self.notice = ScanNotice(level=level, message=message, error=error)
        if self._on_notice:
            self._on_notice(self.notice)

    def start(self) -> None:
        """Acquire the camera. A failure is terminal for this session."""
        if self._state == ScanState.SCANNING:
            return
        if ScanState.SCANNING not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"cannot start scanning while {self._state.value}")
        self._session = None
        self.notice = None
        try:
            self._frames.open()
        except CameraUnavailableError as e:
            self._frames.release()
            self._notify("error", str(e), e)
            logger.error("camera unavailable: %s", e)
            raise
        self._transition(ScanState.SCANNING)

    def stop(self) -> None:
        self._frames.release()
        if self._state == ScanState.SCANNING:
            self._transition(ScanState.IDLE)

    def tick(self) -> bool:
        """Process one frame. Returns True when a symbol was decoded."""
        if self._state != ScanState.SCANNING:
            return False

        frame = self._frames.read()
        if frame is None:
            return False

        symbol = self._decoder.decode(frame)
        if symbol is None or not symbol.data:
            return False

        self._frames.release()
        self._transition(ScanState.DECODED)
        self._validate(symbol.data)
        return True

    def run(self, *, max_ticks: Optional[int] = None) -> ScanState:
        """Drive ``tick`` at the configured frame rate until a decode or ``max_ticks``."""
        self.start()
        ticks = 0
        try:
            while self._state == ScanState.SCANNING:
                started = self._clock()
                self.tick()
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
                remaining = self._frame_interval - (self._clock() - started)
                if remaining > 0:
                    self._sleep(remaining)
        finally:
            if self._state == ScanState.SCANNING:
                self.stop()
        return self._state

    def submit_raw(self, raw: str) -> Optional[ScanSession]:
        """Feed an already-decoded payload (e.g. from the still-image path)."""
        if self._state == ScanState.SCANNING:
            self._frames.release()
        self._transition(ScanState.DECODED)
        return self._validate(raw)

    def scan_image(self, image: ImageInput) -> Optional[ScanSession]:
        try:
            symbol = decode_image(image, decoder=self._decoder)
        except DecodeError as e:
            self._notify("error", str(e), e)
            return None
        return self.submit_raw(symbol.data)

    def _validate(self, raw: str) -> Optional[ScanSession]:
        self._transition(ScanState.VALIDATING)
        try:
            session = self._pipeline.validate(raw, self._roster())
        except ValidationError as e:
            self._transition(ScanState.IDLE)
            self._notify("error", str(e), e)
            logger.info("scan rejected: %s", e)
            return None
        except Exception:
            self._transition(ScanState.IDLE)
            logger.exception("validation crashed, scanner reset to idle")
            raise

        self._session = session
        self._transition(ScanState.CONFIRMING)
        self._notify("success", f"QR scanned: {session.student_id}")
        return session

    def confirm(self, marker: Callable[[ScanSession], T]) -> T:
        """Commit the pending scan through ``marker``.

        If ``marker`` raises, the session stays in CONFIRMING so the operator
        can retry or cancel.
        """
        if self._state != ScanState.CONFIRMING or self._session is None:
            raise RuntimeError("no scan awaiting confirmation")

        try:
            result = marker(self._session)
        except DomainError as e:
            self._notify("error", str(e), e)
            raise

        self._session = None
        self._transition(ScanState.MARKED)
        self._notify("success", "Attendance marked")
        return result

    def cancel(self) -> None:
        self._frames.release()
        self._session = None
        if self._state != ScanState.IDLE:
            self._transition(ScanState.IDLE)
