from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Optional

from core.backup_manager import BackupManager
from core.config_manager import ConfigManager
from core.errors import MatchHelperError
from core.file_catalog import FileCatalog
from core.path_manager import PathManager
from core.platform_support import PLATFORM, PlatformInfo
from core.selection_controller import SelectionController


class MatchHelperAPI:
    """Exposes the match helper to the JavaScript side of the window.

    Every method returns a JSON-friendly dict with a `status` of `success` or
    `error`; errors carry a `code` and a human readable `detail` and are never
    raised into pywebview. pywebview calls the API from worker threads, so all
    commands run under one lock.
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        path_manager: Optional[PathManager] = None,
        platform_info: Optional[PlatformInfo] = None,
    ) -> None:
        self.config_manager = config_manager or ConfigManager()
        self.platform = platform_info or PLATFORM
        self.path_manager = path_manager or PathManager(
            self.platform, override=self.config_manager.get_match_dir_override()
        )
        self.backup_manager = BackupManager(self.config_manager.editor_backup_dir())
        self._lock = threading.Lock()
        self._build_controller()
        print(f"[INFO] Match helper ready with {len(self.controller.files)} match files", flush=True)

    def _build_controller(self) -> None:
        self._paths = self.path_manager.get_paths()
        print(f"[INFO] Match directory: {self._paths.match}", flush=True)
        self.catalog = FileCatalog(self._paths.match)
        self.controller = SelectionController(
            self.catalog,
            backup_manager=self.backup_manager,
            initial_file=self.config_manager.get_preference("lastSelectedFile"),
        )

    @staticmethod
    def _coerce_int(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool) or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _error(exc: MatchHelperError, **extra: Any) -> Dict[str, Any]:
        result = {"status": "error", "code": exc.code, "detail": str(exc)}
        result.update(extra)
        return result

    def _remember_selection(self) -> None:
        selected = self.controller.selected_file
        if selected and selected != self.config_manager.get_preference("lastSelectedFile"):
            self.config_manager.set_preference("lastSelectedFile", selected)

    def _load_payload(self) -> Dict[str, Any]:
        return self.controller.load_result.to_dict()

    def ping(self) -> Dict[str, Any]:
        return {"status": "success", "ready": True}

    def get_state(self) -> Dict[str, Any]:
        with self._lock:
            state = self.controller.state
            entries = self.controller.filtered_matches()
            return {
                "status": "success",
                "configDir": str(self._paths.match),
                "directoryExists": self.catalog.directory_exists(),
                "files": self.controller.files,
                "selected": state.selected_file,
                "filter": state.filter_text,
                "draft": {"trigger": state.draft_trigger, "replace": state.draft_replace},
                "editing": state.editing,
                "load": self._load_payload(),
                "count": len(entries),
                "results": [entry.to_dict() for entry in entries],
            }

    def list_files(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "status": "success",
                "files": self.controller.list_files(),
                "selected": self.controller.selected_file,
                "directoryExists": self.catalog.directory_exists(),
            }

    def select_file(self, name: str) -> Dict[str, Any]:
        with self._lock:
            try:
                self.controller.select_file(name)
            except MatchHelperError as exc:
                return self._error(exc)
            self._remember_selection()
            return {"status": "success", "selected": name, "load": self._load_payload()}

    def refresh(self) -> Dict[str, Any]:
        with self._lock:
            self.controller.refresh()
            self._remember_selection()
            return {
                "status": "success",
                "files": self.controller.files,
                "selected": self.controller.selected_file,
                "load": self._load_payload(),
            }

    def set_filter(self, text: str) -> Dict[str, Any]:
        with self._lock:
            self.controller.set_filter(text if isinstance(text, str) else "")
            return {"status": "success", "filter": self.controller.state.filter_text}

    def filtered_matches(self) -> Dict[str, Any]:
        with self._lock:
            entries = self.controller.filtered_matches()
            return {"status": "success", "count": len(entries), "results": [e.to_dict() for e in entries]}

    def begin_edit(self, filtered_index: Any) -> Dict[str, Any]:
        with self._lock:
            index = self._coerce_int(filtered_index)
            entry = self.controller.begin_edit(index) if index is not None else None
            if entry is None:
                return {"status": "error", "code": "stale_entry", "detail": "That match is no longer listed"}
            return {"status": "success", "entry": entry.to_dict()}

    def set_draft(self, trigger: str, replace: str) -> Dict[str, Any]:
        with self._lock:
            self.controller.set_draft(
                trigger if isinstance(trigger, str) else "",
                replace if isinstance(replace, str) else "",
            )
            return {"status": "success"}

    def commit_draft(self, trigger: str, replace: str, force: bool = False) -> Dict[str, Any]:
        with self._lock:
            editing = self.controller.state.editing
            try:
                accepted = self.controller.commit_draft(trigger, replace, force=bool(force))
            except MatchHelperError as exc:
                print(f"[ERROR] Saving match failed: {exc}", flush=True)
                return self._error(exc, accepted=False)
            if not accepted:
                return {
                    "status": "error",
                    "code": "rejected",
                    "accepted": False,
                    "detail": "Trigger and replacement are both required",
                }
            verb = "Updated" if editing else "Added"
            return {"status": "success", "accepted": True, "detail": f"{verb} {trigger}"}

    def cancel_edit(self) -> Dict[str, Any]:
        with self._lock:
            self.controller.cancel_edit()
            return {"status": "success"}

    def delete_at(self, filtered_index: Any, force: bool = False) -> Dict[str, Any]:
        with self._lock:
            index = self._coerce_int(filtered_index)
            try:
                deleted = index is not None and self.controller.delete_at(index, force=bool(force))
            except MatchHelperError as exc:
                print(f"[ERROR] Deleting match failed: {exc}", flush=True)
                return self._error(exc)
            if not deleted:
                return {"status": "error", "code": "stale_entry", "detail": "That match is no longer listed"}
            return {"status": "success", "detail": "Match deleted"}

    def open_config_folder(self) -> Dict[str, Any]:
        folder = Path(self._paths.match)
        if not folder.is_dir():
            return {"status": "error", "code": "open_failed", "detail": f"Config directory not found: {folder}"}
        result = self.platform.open_folder(folder)
        if result.get("status") != "success":
            result["code"] = "open_failed"
        return result

    def set_match_dir_override(self, new_path: str) -> Dict[str, Any]:
        target = Path(new_path).expanduser() if new_path else None
        if target is None or not target.is_dir():
            return {"status": "error", "code": "unknown_dir", "detail": f"Match directory not found: {new_path}"}
        with self._lock:
            self.config_manager.set_preference("matchDirOverride", str(target))
            self.path_manager.set_override(str(target))
            self._build_controller()
            return {"status": "success", "detail": f"Match directory set to {target}", "files": self.controller.files}

    def clear_match_dir_override(self) -> Dict[str, Any]:
        with self._lock:
            self.config_manager.set_preference("matchDirOverride", "")
            self.path_manager.set_override(None)
            self._build_controller()
            return {"status": "success", "detail": "Reverted to the default Espanso match directory"}
