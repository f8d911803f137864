"""Platform detection and the few OS conventions the helper relies on."""

from __future__ import annotations

import os
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class PlatformInfo:
    system: str
    release: str = ""

    @property
    def is_windows(self) -> bool:
        return self.system == "Windows"

    @property
    def is_macos(self) -> bool:
        return self.system == "Darwin"

    @property
    def is_wsl(self) -> bool:
        return self.system == "Linux" and "microsoft" in self.release.lower()

    def config_root(self, env: Optional[Mapping[str, str]] = None, home: Optional[Path] = None) -> Path:
        """Return the per-user configuration directory for this platform."""
        env = os.environ if env is None else env
        home = Path.home() if home is None else home
        if self.is_windows:
            appdata = env.get("APPDATA")
            return Path(appdata) if appdata else home / "AppData" / "Roaming"
        if self.is_macos:
            return home / "Library" / "Application Support"
        xdg = env.get("XDG_CONFIG_HOME")
        if xdg and Path(xdg).is_absolute():
            return Path(xdg)
        return home / ".config"

    def match_dir(self, env: Optional[Mapping[str, str]] = None, home: Optional[Path] = None) -> Path:
        return self.config_root(env, home) / "espanso" / "match"

    def open_command(self, path: Path) -> List[str]:
        """Command that shows `path` in the platform file manager."""
        if self.is_windows:
            return ["explorer", str(path)]
        if self.is_macos:
            return ["open", str(path)]
        return ["xdg-open", str(path)]

    def open_folder(self, path: Path) -> Dict[str, str]:
        """Launch the file manager without waiting for it to exit."""
        cmd = self.open_command(path)
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except (OSError, ValueError) as exc:
            print(f"[WARNING] Could not open {path} with {cmd[0]}: {exc}", flush=True)
            return {"status": "error", "detail": f"Could not open folder: {exc}"}
        return {"status": "success", "detail": f"Opened {path}"}

    def gui_preferences(self) -> List[Optional[str]]:
        """PyWebView backends to try in order; None lets pywebview choose."""
        if self.is_windows:
            return ["edgechromium", "winforms", None]
        if self.is_macos:
            return ["cocoa", None]
        return ["gtk", "qt", None]

    def gui_dependency_hint(self) -> str:
        if self.is_windows:
            return "Install the Microsoft Edge WebView2 runtime."
        if self.is_macos:
            return "Install pyobjc (pip install pyobjc) for the Cocoa backend."
        return "Install PyGObject with WebKit2GTK, or PyQt with QtWebEngine (pip install pywebview[qt])."


def detect_platform() -> PlatformInfo:
    return PlatformInfo(system=platform.system(), release=platform.release())


PLATFORM = detect_platform()
