from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.platform_support import PLATFORM, PlatformInfo


@dataclass(frozen=True)
class HelperPaths:
    config: Path
    match: Path
    overridden: bool = False


class PathManager:
    """Resolve the Espanso match directory from platform conventions.

    Accepts an optional `platform_info` for injection in tests. An override
    points straight at a match directory and wins over the platform default.
    """

    def __init__(self, platform_info: Optional[PlatformInfo] = None, override: Optional[str] = None) -> None:
        self.platform = platform_info or PLATFORM
        self._paths = self.discover_paths(override)

    def discover_paths(self, override: Optional[str] = None) -> HelperPaths:
        target = self._coerce_override(override)
        if target is not None:
            self._paths = HelperPaths(config=target.parent, match=target, overridden=True)
        else:
            match_dir = self.platform.match_dir()
            self._paths = HelperPaths(config=match_dir.parent, match=match_dir)
        return self._paths

    def get_paths(self) -> HelperPaths:
        return self._paths

    def set_override(self, override: Optional[str]) -> HelperPaths:
        return self.discover_paths(override)

    @staticmethod
    def _coerce_override(raw_value: Optional[str]) -> Optional[Path]:
        if not raw_value:
            return None
        try:
            return Path(raw_value).expanduser()
        except (TypeError, RuntimeError):
            return None
