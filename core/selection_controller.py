from __future__ import annotations

import itertools
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from core.backup_manager import BackupManager
from core.errors import NoFileSelectedError, StaleEntryError, UnknownFileError
from core.file_catalog import FileCatalog
from core.match_models import STATUS_NOT_FOUND, LoadResult, MatchEntry
from core.match_store import MatchStore


@dataclass
class SessionState:
    """Per-window UI state. Never written to disk."""

    selected_file: str = ""
    filter_text: str = ""
    draft_trigger: str = ""
    draft_replace: str = ""
    # None while creating; otherwise the entry_id being edited.
    edit_target: Optional[int] = None

    @property
    def editing(self) -> bool:
        return self.edit_target is not None

    def clear_draft(self) -> None:
        self.draft_trigger = ""
        self.draft_replace = ""
        self.edit_target = None


class SelectionController:
    """Owns the session state and routes UI commands to the catalog and store.

    List positions coming from the UI always index the filtered view; they are
    resolved to entry ids before anything is edited or deleted. Entry ids come
    from one counter shared by every store this controller opens, so an edit
    target left over from another file can never match an entry of the current
    one.
    """

    def __init__(
        self,
        catalog: FileCatalog,
        backup_manager: Optional[BackupManager] = None,
        preserve_unknown: bool = True,
        initial_file: Optional[str] = None,
    ) -> None:
        self.catalog = catalog
        self.state = SessionState()
        self._backup_manager = backup_manager
        self._preserve_unknown = preserve_unknown
        self._ids = itertools.count()
        self._store: Optional[MatchStore] = None
        self._files: List[str] = catalog.list_files()
        if initial_file and initial_file in self._files:
            self.state.selected_file = initial_file
        else:
            self.state.selected_file = self._files[0] if self._files else ""
        self._load_selected()

    @property
    def files(self) -> List[str]:
        return list(self._files)

    @property
    def selected_file(self) -> str:
        return self.state.selected_file

    @property
    def config_dir(self) -> Optional[Path]:
        return self.catalog.match_dir

    @property
    def load_result(self) -> LoadResult:
        if self._store is None:
            return LoadResult(status=STATUS_NOT_FOUND)
        return self._store.load_result

    def list_files(self) -> List[str]:
        return self.files

    def select_file(self, name: str) -> LoadResult:
        if name not in self._files:
            print(f"[WARNING] Rejected selection of unknown match file {name!r}", flush=True)
            raise UnknownFileError(name)
        self.state.selected_file = name
        return self._load_selected()

    def refresh(self) -> LoadResult:
        self.state.filter_text = ""
        self.state.clear_draft()
        self._files = self.catalog.list_files()
        if self.state.selected_file not in self._files:
            self.state.selected_file = self._files[0] if self._files else ""
        return self._load_selected()

    def set_filter(self, text: str) -> None:
        self.state.filter_text = text or ""

    def filtered_matches(self) -> List[MatchEntry]:
        if self._store is None:
            return []
        return self._store.filter(self.state.filter_text)

    def begin_edit(self, filtered_index: int) -> Optional[MatchEntry]:
        entry = self._resolve(filtered_index)
        if entry is None:
            return None
        self.state.draft_trigger = entry.trigger
        self.state.draft_replace = entry.replace
        self.state.edit_target = entry.entry_id
        return entry

    def set_draft(self, trigger: str, replace: str) -> None:
        self.state.draft_trigger = trigger
        self.state.draft_replace = replace

    def commit_draft(self, trigger: Optional[str] = None, replace: Optional[str] = None, force: bool = False) -> bool:
        """Save the draft as a new match or over the edit target.

        The draft is kept when the commit is rejected or fails so the user can
        correct it and retry. Only empty fields return False; a missing file, a
        stale edit target, write failures and unparsed-file refusals are raised
        to the caller.
        """
        if trigger is not None:
            self.state.draft_trigger = trigger
        if replace is not None:
            self.state.draft_replace = replace
        if self._store is None:
            print("[WARNING] No match file selected; nothing to save into", flush=True)
            raise NoFileSelectedError()
        try:
            accepted = self._store.upsert(
                self.state.draft_trigger,
                self.state.draft_replace,
                entry_id=self.state.edit_target,
                force=force,
            )
        except StaleEntryError:
            self.state.edit_target = None
            raise
        if accepted:
            self.state.clear_draft()
        return accepted

    def cancel_edit(self) -> None:
        self.state.clear_draft()

    def delete_at(self, filtered_index: int, force: bool = False) -> bool:
        entry = self._resolve(filtered_index)
        if entry is None or self._store is None:
            return False
        deleted = self._store.delete(entry.entry_id, force=force)
        if deleted and self.state.edit_target == entry.entry_id:
            self.state.clear_draft()
        return deleted

    def _resolve(self, filtered_index: int) -> Optional[MatchEntry]:
        view = self.filtered_matches()
        if not 0 <= filtered_index < len(view):
            print(f"[WARNING] Ignoring stale list index {filtered_index} (showing {len(view)})", flush=True)
            return None
        return view[filtered_index]

    def _load_selected(self) -> LoadResult:
        if not self.state.selected_file:
            self._store = None
            return self.load_result
        store = MatchStore(
            self.catalog.path_for(self.state.selected_file),
            backup_manager=self._backup_manager,
            preserve_unknown=self._preserve_unknown,
            id_source=self._ids,
        )
        result = store.load()
        self._store = store
        print(f"[INFO] Loaded {len(result.matches)} matches from {self.state.selected_file} ({result.status})", flush=True)
        return result
