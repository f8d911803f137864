from __future__ import annotations

import dataclasses
import itertools
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar
import yaml

from core.backup_manager import BackupManager
from core.errors import MatchWriteError, StaleEntryError, UnparsedContentError
from core.match_models import (
    STATUS_NOT_FOUND,
    STATUS_OK,
    STATUS_PARSE_ERROR,
    STATUS_READ_ERROR,
    LoadResult,
    Match,
    MatchEntry,
)

T = TypeVar("T")


# -------------------------
# Reading and writing files
# -------------------------
def _read_document(path: Path) -> Tuple[str, Dict[str, Any], str]:
    """Read `path` and return (status, document, detail)."""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return STATUS_NOT_FOUND, {}, ""
    except (OSError, UnicodeDecodeError) as exc:
        return STATUS_READ_ERROR, {}, str(exc)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        return STATUS_PARSE_ERROR, {}, str(exc)

    if data is None:
        return STATUS_OK, {}, ""
    if not isinstance(data, dict):
        return STATUS_PARSE_ERROR, {}, "top-level document is not a mapping"
    matches = data.get("matches")
    if matches is not None and not isinstance(matches, list):
        return STATUS_PARSE_ERROR, {}, "`matches` is not a list"
    return STATUS_OK, data, ""


def _decode_match(raw: Any) -> Optional[Match]:
    if not isinstance(raw, dict):
        return None
    trigger = raw.get("trigger")
    replace = raw.get("replace")
    if not isinstance(trigger, str) or not isinstance(replace, str):
        return None
    return Match(trigger=trigger, replace=replace)


def _dump_document(document: Dict[str, Any]) -> str:
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _write_text(path: Path, text: str) -> None:
    """Write through a temporary sibling file and rename it over `path`."""
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        if path.exists():
            shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
        raise MatchWriteError(path, str(exc)) from exc


def load_matches(path: Path) -> LoadResult:
    """Load the trigger/replace pairs of one match file.

    Missing, unreadable and malformed files all produce an empty list; the
    returned status tells them apart. Entries without a string `trigger` and a
    string `replace` are dropped.
    """
    path = Path(path)
    status, document, detail = _read_document(path)
    if status != STATUS_OK:
        if status != STATUS_NOT_FOUND:
            print(f"[WARNING] Could not load {path.name} ({status}): {detail}", flush=True)
        return LoadResult(status=status, detail=detail)

    matches: List[Match] = []
    dropped = 0
    for raw in document.get("matches") or []:
        match = _decode_match(raw)
        if match is None:
            dropped += 1
            continue
        matches.append(match)
    return LoadResult(status=STATUS_OK, matches=matches, dropped=dropped)


def save_matches(path: Path, matches: Sequence[Match]) -> None:
    """Overwrite `path` with exactly `{matches: [{trigger, replace}, ...]}`."""
    document = {"matches": [m.to_dict() for m in matches]}
    _write_text(Path(path), _dump_document(document))


# -------------------------
# Operations on match lists
# -------------------------
def _draft_is_valid(trigger: str, replace: str) -> bool:
    return bool(trigger) and bool(replace)


def filter_matches(matches: Sequence[T], query: str) -> List[T]:
    """Entries whose trigger or replace contains `query`, ignoring case."""
    needle = (query or "").lower()
    if not needle:
        return list(matches)
    return [m for m in matches if needle in m.trigger.lower() or needle in m.replace.lower()]


def upsert_match(
    matches: Sequence[Match], target_index: Optional[int], trigger: str, replace: str
) -> Tuple[List[Match], bool]:
    """Append a match, or replace the one at `target_index`.

    Returns the new list and whether the edit was accepted. Empty fields and
    out-of-range indices are rejected and leave the list unchanged.
    """
    result = list(matches)
    if not _draft_is_valid(trigger, replace):
        return result, False
    new_match = Match(trigger=trigger, replace=replace)
    if target_index is None:
        result.append(new_match)
        return result, True
    if not 0 <= target_index < len(result):
        print(f"[WARNING] Ignoring edit of stale match index {target_index} (have {len(result)})", flush=True)
        return result, False
    result[target_index] = new_match
    return result, True


def delete_match_at(matches: Sequence[Match], index: int) -> List[Match]:
    result = list(matches)
    if 0 <= index < len(result):
        del result[index]
    return result


# -------------------------
# Stateful store for one file
# -------------------------
@dataclasses.dataclass(frozen=True)
class _Slot:
    """One element of the file's `matches` list.

    `match` is None for entries the helper cannot edit (forms, regex triggers,
    images...); those are written back untouched.
    """

    entry_id: int
    match: Optional[Match]
    raw: Any = None


class MatchStore:
    """Loads, edits and saves the matches of a single Espanso match file.

    Every accepted edit is written to disk before the call returns. By default
    the rest of the YAML document (other top-level keys, extra match fields and
    entries the helper cannot edit) is kept on save; with
    `preserve_unknown=False` the file is rewritten as a bare trigger/replace
    list. Files that failed to load are never overwritten unless the caller
    passes `force=True`, in which case the old file is backed up first.
    """

    def __init__(
        self,
        path: Path,
        backup_manager: Optional[BackupManager] = None,
        preserve_unknown: bool = True,
        id_source: Optional[Iterator[int]] = None,
    ) -> None:
        self.path = Path(path)
        self.preserve_unknown = preserve_unknown
        self._backup_manager = backup_manager
        self._document: Dict[str, Any] = {}
        self._slots: List[_Slot] = []
        self._ids = id_source if id_source is not None else itertools.count()
        self._load_result = LoadResult(status=STATUS_NOT_FOUND)

    @property
    def load_result(self) -> LoadResult:
        return self._load_result

    @property
    def entries(self) -> List[MatchEntry]:
        return [MatchEntry(s.entry_id, s.match) for s in self._slots if s.match is not None]

    @property
    def matches(self) -> List[Match]:
        return [s.match for s in self._slots if s.match is not None]

    def load(self) -> LoadResult:
        status, document, detail = _read_document(self.path)
        self._document = document
        self._slots = []
        dropped = 0
        for raw in document.get("matches") or []:
            match = _decode_match(raw)
            if match is None:
                dropped += 1
            self._slots.append(_Slot(self._allocate_id(), match, raw))

        if status in (STATUS_READ_ERROR, STATUS_PARSE_ERROR):
            print(f"[WARNING] Could not load {self.path.name} ({status}): {detail}", flush=True)
        self._load_result = LoadResult(status=status, matches=self.matches, detail=detail, dropped=dropped)
        return self._load_result

    def get(self, entry_id: int) -> Optional[MatchEntry]:
        for slot in self._slots:
            if slot.entry_id == entry_id and slot.match is not None:
                return MatchEntry(slot.entry_id, slot.match)
        return None

    def filter(self, query: str) -> List[MatchEntry]:
        return filter_matches(self.entries, query)

    def upsert(self, trigger: str, replace: str, entry_id: Optional[int] = None, force: bool = False) -> bool:
        """Add a new match, or update the entry with `entry_id` in place.

        Returns False when either field is empty. Raises StaleEntryError when
        `entry_id` is not in the collection.
        """
        if not _draft_is_valid(trigger, replace):
            return False
        self._check_overwrite_allowed(force)

        new_match = Match(trigger=trigger, replace=replace)
        slots = list(self._slots)
        if entry_id is None:
            slots.append(_Slot(self._allocate_id(), new_match))
        else:
            position = self._position_of(entry_id)
            if position is None:
                print(f"[WARNING] Edit target {entry_id} is no longer in {self.path.name}", flush=True)
                raise StaleEntryError(entry_id)
            slots[position] = dataclasses.replace(slots[position], match=new_match)
        self._persist(slots, force)
        return True

    def delete(self, entry_id: int, force: bool = False) -> bool:
        position = self._position_of(entry_id)
        if position is None:
            print(f"[WARNING] Ignoring delete of unknown entry {entry_id} in {self.path.name}", flush=True)
            return False
        self._check_overwrite_allowed(force)
        slots = list(self._slots)
        del slots[position]
        self._persist(slots, force)
        return True

    def _allocate_id(self) -> int:
        return next(self._ids)

    def _position_of(self, entry_id: int) -> Optional[int]:
        for position, slot in enumerate(self._slots):
            if slot.entry_id == entry_id and slot.match is not None:
                return position
        return None

    def _check_overwrite_allowed(self, force: bool) -> None:
        if self._load_result.failed and not force:
            print(f"[WARNING] Refusing to overwrite unparsed file {self.path}", flush=True)
            raise UnparsedContentError(self.path, self._load_result.detail)

    def _build_document(self, slots: List[_Slot]) -> Dict[str, Any]:
        if not self.preserve_unknown:
            return {"matches": [s.match.to_dict() for s in slots if s.match is not None]}

        items: List[Any] = []
        for slot in slots:
            if slot.match is None:
                items.append(slot.raw)
            elif isinstance(slot.raw, dict):
                entry = dict(slot.raw)
                entry["trigger"] = slot.match.trigger
                entry["replace"] = slot.match.replace
                items.append(entry)
            else:
                items.append(slot.match.to_dict())
        document = dict(self._document)
        document["matches"] = items
        return document

    def _persist(self, slots: List[_Slot], force: bool) -> None:
        if force and self._load_result.failed and self.path.exists():
            if self._backup_manager is None:
                raise MatchWriteError(self.path, "no backup location configured for a forced overwrite")
            backup = self._backup_manager.backup_file(self.path)
            if backup.get("status") != "success":
                raise MatchWriteError(self.path, f"backup failed: {backup.get('detail')}")

        if not self.preserve_unknown:
            slots = [s for s in slots if s.match is not None]
        document = self._build_document(slots)
        _write_text(self.path, _dump_document(document))

        self._slots = slots
        self._document = document
        dropped = sum(1 for s in slots if s.match is None)
        self._load_result = LoadResult(status=STATUS_OK, matches=self.matches, dropped=dropped)
