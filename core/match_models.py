from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

STATUS_OK = "ok"
STATUS_NOT_FOUND = "not_found"
STATUS_READ_ERROR = "read_error"
STATUS_PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class Match:
    trigger: str
    replace: str

    def to_dict(self) -> Dict[str, str]:
        return {"trigger": self.trigger, "replace": self.replace}


@dataclass(frozen=True)
class MatchEntry:
    """A match as shown in the list, carrying the id used to edit or delete it."""

    entry_id: int
    match: Match

    @property
    def trigger(self) -> str:
        return self.match.trigger

    @property
    def replace(self) -> str:
        return self.match.replace

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.entry_id, "trigger": self.trigger, "replace": self.replace}


@dataclass
class LoadResult:
    """Outcome of reading one match file.

    `matches` is always a list; it is empty unless `status` is `ok`. `dropped`
    counts entries skipped because they lacked a string trigger or replace.
    """

    status: str
    matches: List[Match] = field(default_factory=list)
    detail: str = ""
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def failed(self) -> bool:
        """True when the file exists but its content could not be used."""
        return self.status in (STATUS_READ_ERROR, STATUS_PARSE_ERROR)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "count": len(self.matches),
            "detail": self.detail,
            "dropped": self.dropped,
        }
