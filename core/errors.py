from __future__ import annotations

from pathlib import Path
from typing import Optional


class MatchHelperError(Exception):
    """Base class for errors the GUI layer reports instead of crashing."""

    code = "error"


class MatchWriteError(MatchHelperError):
    """Raised when a match file cannot be written."""

    code = "write_failed"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
        self.reason = reason


class UnparsedContentError(MatchHelperError):
    """Raised when an edit would overwrite a file whose content was never parsed."""

    code = "unparsed_content"

    def __init__(self, path: Path, detail: str = "") -> None:
        message = f"{path.name} could not be read as a match file; refusing to overwrite it"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.path = path
        self.detail = detail


class StaleEntryError(MatchHelperError):
    """Raised when an edit targets an entry that is no longer in the collection."""

    code = "stale_entry"

    def __init__(self, entry_id: Optional[int]) -> None:
        super().__init__(f"Match entry {entry_id} no longer exists")
        self.entry_id = entry_id


class UnknownFileError(MatchHelperError):
    code = "unknown_file"

    def __init__(self, name: str) -> None:
        super().__init__(f"Match file not found in catalog: {name}")
        self.name = name


class NoFileSelectedError(MatchHelperError):
    code = "no_file_selected"

    def __init__(self) -> None:
        super().__init__("No match file selected; create a .yml file in the match directory first")
