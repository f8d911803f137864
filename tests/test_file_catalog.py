from pathlib import Path
import tempfile

from core.file_catalog import FileCatalog, list_yaml_files


def test_lists_only_yml_files_sorted():
    with tempfile.TemporaryDirectory() as td:
        match_dir = Path(td)
        (match_dir / "work.yml").write_text("matches: []\n", encoding="utf-8")
        (match_dir / "base.yml").write_text("matches: []\n", encoding="utf-8")
        (match_dir / "notes.yaml").write_text("matches: []\n", encoding="utf-8")
        (match_dir / "readme.txt").write_text("hi", encoding="utf-8")
        (match_dir / ".yml").write_text("", encoding="utf-8")
        (match_dir / "nested.yml").mkdir()
        (match_dir / "sub").mkdir()
        (match_dir / "sub" / "deep.yml").write_text("matches: []\n", encoding="utf-8")

        assert list_yaml_files(match_dir) == ["base.yml", "work.yml"]


def test_missing_directory_is_empty():
    with tempfile.TemporaryDirectory() as td:
        catalog = FileCatalog(Path(td) / "does-not-exist")
        assert catalog.list_files() == []
        assert catalog.directory_exists() is False


def test_unconfigured_catalog_is_empty():
    catalog = FileCatalog()
    assert catalog.list_files() == []
    assert list_yaml_files(None) == []


def test_path_for_joins_file_name():
    with tempfile.TemporaryDirectory() as td:
        catalog = FileCatalog(Path(td))
        assert catalog.directory_exists() is True
        assert catalog.path_for("base.yml") == Path(td) / "base.yml"
