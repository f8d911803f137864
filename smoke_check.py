# smoke_check.py - headless check that the helper API wires up against a throwaway profile
from pathlib import Path
import tempfile
import traceback

from core.config_manager import ConfigManager
from core.path_manager import PathManager
from ui.gui_api import MatchHelperAPI


def main() -> int:
    with tempfile.TemporaryDirectory() as td:
        root = Path(td)
        match_dir = root / "match"
        match_dir.mkdir()
        (match_dir / "base.yml").write_text('matches:\n  - trigger: ":hi"\n    replace: "hello"\n', encoding="utf-8")
        try:
            api = MatchHelperAPI(
                config_manager=ConfigManager(base_dir=root / "profile"),
                path_manager=PathManager(override=str(match_dir)),
            )
            print("MatchHelperAPI instantiated:", type(api))
            print("state:", api.get_state())
            print("add:", api.commit_draft(":bye", "goodbye"))
            print("matches:", api.filtered_matches())
        except Exception as exc:
            print("Smoke check FAILED:", exc)
            traceback.print_exc()
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
