from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

MATCH_FILE_SUFFIX = ".yml"


def list_yaml_files(directory: Optional[Path]) -> List[str]:
    """Names of the `.yml` regular files directly inside `directory`, sorted.

    A missing or unreadable directory yields an empty list, and entries that
    cannot be inspected are skipped.
    """
    if directory is None:
        return []
    names: List[str] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if Path(entry.name).suffix != MATCH_FILE_SUFFIX:
                        continue
                    if not entry.is_file():
                        continue
                    # Undecodable names surface as surrogate escapes.
                    entry.name.encode("utf-8")
                except (OSError, UnicodeEncodeError):
                    continue
                names.append(entry.name)
    except OSError:
        return []
    return sorted(names)


class FileCatalog:
    """Enumerates the candidate match files of one directory."""

    def __init__(self, match_dir: Optional[Path] = None) -> None:
        self.match_dir = Path(match_dir) if match_dir is not None else None

    def list_files(self) -> List[str]:
        return list_yaml_files(self.match_dir)

    def directory_exists(self) -> bool:
        return self.match_dir is not None and self.match_dir.is_dir()

    def path_for(self, name: str) -> Path:
        if self.match_dir is None:
            raise ValueError("Match directory not configured")
        return self.match_dir / name
