from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigManager:
    """Manage preferences and the storage directory of the match helper.

    Preferences live in `preferences.json` under the base directory. Known keys
    are `matchDirOverride` and `lastSelectedFile`.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        # Allow tests to override where preferences are stored.
        self._base = Path(base_dir) if base_dir is not None else Path.home() / ".espanso_helper"
        self._preferences_path = self._base / "preferences.json"
        self._preferences: Dict[str, Any] = self._load_preferences()

    def _load_preferences(self) -> Dict[str, Any]:
        if not self._preferences_path.exists():
            return {}
        try:
            data = json.loads(self._preferences_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"[WARNING] Ignoring unreadable preferences {self._preferences_path}: {exc}", flush=True)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_preferences(self) -> None:
        try:
            self._base.mkdir(parents=True, exist_ok=True)
            self._preferences_path.write_text(json.dumps(self._preferences, indent=2), encoding="utf-8")
        except OSError as exc:
            # Best-effort persist; preferences are a convenience only.
            print(f"[WARNING] Could not save preferences: {exc}", flush=True)

    def get_preference(self, key: str, default: Any = None) -> Any:
        return self._preferences.get(key, default)

    def set_preference(self, key: str, value: Any) -> None:
        self._preferences[key] = value
        self._save_preferences()

    def get_match_dir_override(self) -> Optional[str]:
        return self._preferences.get("matchDirOverride") or None

    def editor_backup_dir(self) -> Path:
        return self._base / "editor_backups"
