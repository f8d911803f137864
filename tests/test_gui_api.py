from pathlib import Path
from unittest.mock import patch
import tempfile

from core.config_manager import ConfigManager
from core.match_models import Match
from core.match_store import load_matches, save_matches
from core.path_manager import PathManager
from ui.gui_api import MatchHelperAPI


class DummyPlatform:
    is_windows = False
    is_wsl = False

    def __init__(self, fail=False):
        self.fail = fail
        self.opened = []

    def open_folder(self, path):
        self.opened.append(path)
        if self.fail:
            return {"status": "error", "detail": "Could not open folder: no opener"}
        return {"status": "success", "detail": f"Opened {path}"}


def _setup(td: str, platform=None):
    root = Path(td)
    match_dir = root / "match"
    match_dir.mkdir()
    save_matches(match_dir / "base.yml", [Match(":a", "apple")])
    save_matches(match_dir / "work.yml", [Match(":w", "work")])
    config = ConfigManager(base_dir=root / "profile")
    api = MatchHelperAPI(
        config_manager=config,
        path_manager=PathManager(override=str(match_dir)),
        platform_info=platform or DummyPlatform(),
    )
    return api, config, match_dir


def test_list_and_select_files_remembers_selection():
    with tempfile.TemporaryDirectory() as td:
        api, config, match_dir = _setup(td)
        listed = api.list_files()
        assert listed == {"status": "success", "files": ["base.yml", "work.yml"], "selected": "base.yml", "directoryExists": True}

        selected = api.select_file("work.yml")
        assert selected["status"] == "success"
        assert selected["load"]["count"] == 1
        assert config.get_preference("lastSelectedFile") == "work.yml"

        again = MatchHelperAPI(
            config_manager=ConfigManager(base_dir=Path(td) / "profile"),
            path_manager=PathManager(override=str(match_dir)),
            platform_info=DummyPlatform(),
        )
        assert again.list_files()["selected"] == "work.yml"


def test_select_unknown_file_is_reported():
    with tempfile.TemporaryDirectory() as td:
        api, _, _ = _setup(td)
        result = api.select_file("nope.yml")
        assert result["status"] == "error"
        assert result["code"] == "unknown_file"
        assert api.list_files()["selected"] == "base.yml"


def test_rejected_and_stale_commands():
    with tempfile.TemporaryDirectory() as td:
        api, _, match_dir = _setup(td)
        rejected = api.commit_draft(":x", "")
        assert rejected["code"] == "rejected"
        assert rejected["accepted"] is False

        assert api.begin_edit(5)["code"] == "stale_entry"
        assert api.begin_edit("not a number")["code"] == "stale_entry"
        assert api.delete_at(9)["code"] == "stale_entry"
        assert load_matches(match_dir / "base.yml").matches == [Match(":a", "apple")]


def test_begin_edit_accepts_index_from_javascript():
    with tempfile.TemporaryDirectory() as td:
        api, _, _ = _setup(td)
        result = api.begin_edit(0.0)
        assert result["status"] == "success"
        assert result["entry"]["trigger"] == ":a"
        assert api.cancel_edit() == {"status": "success"}
        assert api.get_state()["editing"] is False


def test_write_failure_is_reported_and_draft_kept():
    with tempfile.TemporaryDirectory() as td:
        api, _, match_dir = _setup(td)
        with patch("core.match_store.os.replace", side_effect=OSError("read-only file system")):
            result = api.commit_draft(":b", "banana")
        assert result["status"] == "error"
        assert result["code"] == "write_failed"
        assert "read-only" in result["detail"]
        assert api.get_state()["draft"] == {"trigger": ":b", "replace": "banana"}
        assert load_matches(match_dir / "base.yml").matches == [Match(":a", "apple")]

        retried = api.commit_draft(":b", "banana")
        assert retried["status"] == "success"


def test_refresh_resets_filter_and_draft():
    with tempfile.TemporaryDirectory() as td:
        api, _, match_dir = _setup(td)
        api.set_filter("zzz")
        api.commit_draft(":x", "")
        save_matches(match_dir / "new.yml", [])
        result = api.refresh()
        assert result["files"] == ["base.yml", "new.yml", "work.yml"]
        state = api.get_state()
        assert state["filter"] == ""
        assert state["draft"] == {"trigger": "", "replace": ""}
        assert state["count"] == 1


def test_open_config_folder_delegates_to_platform():
    with tempfile.TemporaryDirectory() as td:
        platform = DummyPlatform()
        api, _, match_dir = _setup(td, platform)
        assert api.open_config_folder()["status"] == "success"
        assert platform.opened == [match_dir]

        failing = DummyPlatform(fail=True)
        api.platform = failing
        result = api.open_config_folder()
        assert result["status"] == "error"
        assert result["code"] == "open_failed"


def test_open_missing_config_folder_is_reported():
    with tempfile.TemporaryDirectory() as td:
        platform = DummyPlatform()
        api = MatchHelperAPI(
            config_manager=ConfigManager(base_dir=Path(td) / "profile"),
            path_manager=PathManager(override=str(Path(td) / "missing")),
            platform_info=platform,
        )
        state = api.get_state()
        assert state["directoryExists"] is False
        assert state["files"] == []
        result = api.open_config_folder()
        assert result["status"] == "error"
        assert platform.opened == []


def test_match_dir_override_switches_catalog():
    with tempfile.TemporaryDirectory() as td:
        api, config, _ = _setup(td)
        other = Path(td) / "other"
        other.mkdir()
        save_matches(other / "personal.yml", [Match(":me", "Me")])

        assert api.set_match_dir_override(str(Path(td) / "absent"))["status"] == "error"

        result = api.set_match_dir_override(str(other))
        assert result["status"] == "success"
        assert result["files"] == ["personal.yml"]
        assert config.get_match_dir_override() == str(other)
        assert api.get_state()["configDir"] == str(other)

        api.clear_match_dir_override()
        assert config.get_match_dir_override() is None


def test_commit_after_switching_files_reports_stale_entry():
    with tempfile.TemporaryDirectory() as td:
        api, _, match_dir = _setup(td)
        assert api.begin_edit(0)["status"] == "success"
        assert api.select_file("work.yml")["status"] == "success"

        result = api.commit_draft(":a", "changed")
        assert result["status"] == "error"
        assert result["code"] == "stale_entry"
        assert result["accepted"] is False
        assert api.get_state()["editing"] is False
        assert load_matches(match_dir / "base.yml").matches == [Match(":a", "apple")]
        assert load_matches(match_dir / "work.yml").matches == [Match(":w", "work")]


def test_commit_without_match_files_reports_no_file_selected():
    with tempfile.TemporaryDirectory() as td:
        empty = Path(td) / "match"
        empty.mkdir()
        api = MatchHelperAPI(
            config_manager=ConfigManager(base_dir=Path(td) / "profile"),
            path_manager=PathManager(override=str(empty)),
            platform_info=DummyPlatform(),
        )
        result = api.commit_draft(":a", "b")
        assert result["status"] == "error"
        assert result["code"] == "no_file_selected"
        assert list(empty.iterdir()) == []


def test_set_draft_is_kept_across_filter_changes():
    with tempfile.TemporaryDirectory() as td:
        api, _, _ = _setup(td)
        assert api.set_draft(":p", "pear") == {"status": "success"}
        api.set_filter("zzz")
        assert api.get_state()["draft"] == {"trigger": ":p", "replace": "pear"}
        api.set_draft(None, "pear")
        assert api.get_state()["draft"] == {"trigger": "", "replace": "pear"}
