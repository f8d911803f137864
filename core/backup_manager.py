from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict
import shutil


class BackupManager:
    """Keeps timestamped copies of match files before they are overwritten.

    Backups are plain file copies named `<stem>_<timestamp><suffix>` inside the
    backup root.
    """

    def __init__(self, backup_root: Path) -> None:
        self.backup_root = Path(backup_root)

    def backup_file(self, source: Path) -> Dict[str, str]:
        source = Path(source)
        if not source.is_file():
            return {"status": "error", "detail": "Source does not exist"}
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.backup_root / f"{source.stem}_{timestamp}{source.suffix}"
        try:
            self.backup_root.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            return {"status": "error", "detail": str(exc)}
        print(f"[INFO] Backed up {source.name} to {target}", flush=True)
        return {"status": "success", "detail": f"Backup created: {target.name}", "path": str(target)}
