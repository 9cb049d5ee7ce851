from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import RosterEntry


class RosterRepository(Protocol):
    def list_for_section(self, section_id: int, *, year_level: Optional[int] = None) -> Sequence[RosterEntry]:
        raise NotImplementedError
