from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class RosterEntry:
    """A student authorized for a section.

    A scanned holder id may be any of the three identities a student has:
    the students-table row id, the linked user id, or the printed student code.
    """

    db_id: Optional[int]
    user_id: Optional[int]
    student_code: Optional[str]
    section_id: Optional[int]
    year_level: Optional[int] = None
    status: str = "active"
    name: str = ""

    def id_variants(self) -> tuple[str, ...]:
        return tuple(str(v) for v in (self.student_code, self.user_id, self.db_id) if v not in (None, ""))

    def matches(self, holder_id: Any) -> bool:
        if holder_id is None:
            return False
        return str(holder_id).strip() in self.id_variants()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.db_id,
            "user_id": self.user_id,
            "student_id": self.student_code,
            "section_id": self.section_id,
            "year_level": self.year_level,
            "status": self.status,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RosterEntry":
        def _int(v):
            return int(v) if v not in (None, "") else None

        name = data.get("name")
        if not name and (data.get("first_name") or data.get("last_name")):
            name = f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()
        code = data.get("student_id")
        return cls(
            db_id=_int(data.get("id")),
            user_id=_int(data.get("user_id")),
            student_code=str(code) if code not in (None, "") else None,
            section_id=_int(data.get("section_id")),
            year_level=_int(data.get("year_level")),
            status=str(data.get("status") or "active"),
            name=name or "",
        )
