from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from .model import RosterEntry

logger = logging.getLogger(__name__)

RosterFetch = Callable[[int, Optional[int]], Sequence[RosterEntry]]


class RosterLoader:
    """Fetches a section roster off the scanning thread.

    ``snapshot`` is ``None`` until the most recent request has completed, so
    validation can fail closed while a load is pending or has failed.
    """

    def __init__(self, fetch: RosterFetch, *, executor: Optional[ThreadPoolExecutor] = None):
        self._fetch = fetch
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="roster")
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._entries: Optional[tuple[RosterEntry, ...]] = None
        self._pending: Optional[Future] = None
        self._section_id: Optional[int] = None
        self.error: Optional[str] = None

    @property
    def section_id(self) -> Optional[int]:
        return self._section_id

    def request(self, section_id: int, year_level: Optional[int] = None) -> Future:
        """Start loading ``section_id``; any previous roster is dropped."""
        with self._lock:
            self._entries = None
            self._section_id = int(section_id)
            self.error = None
            future = self._executor.submit(self._fetch, int(section_id), year_level)
            self._pending = future
        future.add_done_callback(lambda f, sid=int(section_id): self._on_done(sid, f))
        return future

    def _on_done(self, section_id: int, future: Future) -> None:
        with self._lock:
            if future is not self._pending:
                # superseded by a newer request
                return
            if future.cancelled():
                return
            exc = future.exception()
            if exc is not None:
                self.error = str(exc)
                logger.warning("roster load for section %s failed: %s", section_id, exc)
                return
            self._entries = tuple(future.result())
            logger.info("roster for section %s loaded (%d students)", section_id, len(self._entries))

    def snapshot(self) -> Optional[tuple[RosterEntry, ...]]:
        with self._lock:
            return self._entries

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
