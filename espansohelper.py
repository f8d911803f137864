"""PyWebView-based Espanso match helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import webview

from core.platform_support import PlatformInfo
from ui.gui_api import MatchHelperAPI

HTML_PATH = Path(__file__).with_name("webview_ui") / "match_helper.html"


def _log_gui_attempt(backend: Optional[str]) -> None:
    label = backend or "auto"
    print(f"[DEBUG] Attempting to start PyWebView backend '{label}'", flush=True)


def _start_webview(window: Any, platform_info: PlatformInfo) -> None:
    last_error: Optional[Exception] = None
    if platform_info.is_wsl:
        print(
            "[WARNING] Running inside WSL; a GUI subsystem such as WSLg is required for the window to appear.",
            flush=True,
        )

    print("[DEBUG] Entering PyWebView backend loop", flush=True)

    for preferred in platform_info.gui_preferences():
        try:
            _log_gui_attempt(preferred)
            webview.start(gui=preferred, http_server=False)
            return
        except webview.errors.WebViewException as exc:  # type: ignore[attr-defined]
            last_error = exc
            label = preferred or "auto"
            print(f"[WARNING] GUI backend '{label}' failed: {exc}", flush=True)
            continue
    print(
        "[ERROR] PyWebView could not initialize a GUI backend. "
        f"{platform_info.gui_dependency_hint()}",
        flush=True,
    )
    if last_error:
        raise last_error
    raise webview.errors.WebViewException("No GUI backend available")  # type: ignore[attr-defined]


def main() -> None:
    print("[DEBUG] MatchHelperAPI init starting", flush=True)
    api = MatchHelperAPI()
    print("[DEBUG] MatchHelperAPI init complete", flush=True)

    window = webview.create_window(
        "Espanso Helper",
        html=HTML_PATH.read_text(encoding="utf-8"),
        js_api=api,
        width=800,
        height=600,
        min_size=(600, 400),
    )

    print("[DEBUG] Starting PyWebView", flush=True)
    _start_webview(window, api.platform)


if __name__ == "__main__":
    main()
