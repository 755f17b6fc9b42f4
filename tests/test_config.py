"""Tests for layered TOML configuration."""

from pathlib import Path

import pytest
import toml

from sourcelens import config_manager
from sourcelens.config import ModificationConfig, ResolutionConfig, to_section
from sourcelens.scanner import FileScanner, matches_pattern


def test_defaults(temp_dir: Path):
    resolution, modification = config_manager.load_config(temp_dir)

    assert resolution == ResolutionConfig()
    assert modification == ModificationConfig()
    assert resolution.cache_ttl == 300.0
    assert modification.max_backups == 10


def test_workspace_file_overrides_global(temp_dir: Path):
    config_manager.CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    config_manager.CONFIG_FILE.write_text(
        '[resolution]\nsearch_mode = "best-match"\nmax_depth = 4\n', encoding="utf-8"
    )
    (temp_dir / ".sourcelens.toml").write_text("[resolution]\nmax_depth = 6\n", encoding="utf-8")

    resolution, _ = config_manager.load_config(temp_dir)

    assert resolution.search_mode == "best-match"
    assert resolution.max_depth == 6


def test_explicit_overrides_win(temp_dir: Path):
    (temp_dir / ".sourcelens.toml").write_text(
        '[modification]\nconflict_resolution = "cancel"\n', encoding="utf-8"
    )

    _, modification = config_manager.load_config(
        temp_dir, {"modification": {"conflict_resolution": "auto-merge"}}
    )

    assert modification.conflict_resolution == "auto-merge"


def test_invalid_values_are_ignored(temp_dir: Path):
    (temp_dir / ".sourcelens.toml").write_text(
        '[modification]\nconflict_resolution = "yolo"\nunknown_key = 1\nmax_backups = 3\n',
        encoding="utf-8",
    )

    _, modification = config_manager.load_config(temp_dir)

    assert modification.conflict_resolution == "ask-user"
    assert modification.max_backups == 3


def test_unreadable_toml_is_ignored(temp_dir: Path):
    (temp_dir / ".sourcelens.toml").write_text("[resolution\n", encoding="utf-8")

    resolution, _ = config_manager.load_config(temp_dir)

    assert resolution == ResolutionConfig()


def test_save_config_preserves_other_sections():
    config_manager.save_config("resolution", {"cache_ttl": 60.0})
    config_manager.save_config("modification", {"class_stylesheet": "src/styles.css"})

    saved = toml.load(config_manager.CONFIG_FILE)
    assert saved["resolution"]["cache_ttl"] == 60.0
    assert saved["modification"]["class_stylesheet"] == "src/styles.css"

    resolution, modification = config_manager.load_config()
    assert resolution.cache_ttl == 60.0
    assert modification.class_stylesheet == "src/styles.css"


def test_save_config_unknown_section():
    with pytest.raises(ValueError):
        config_manager.save_config("network", {})


def test_to_section_drops_none():
    assert "class_stylesheet" not in to_section(ModificationConfig())


class TestPatterns:
    @pytest.mark.parametrize(
        "rel,name,pattern,expected",
        [
            ("src/App.jsx", "App.jsx", "**/*.jsx", True),
            ("App.jsx", "App.jsx", "**/*.jsx", True),
            ("src/App.tsx", "App.tsx", "**/*.jsx", False),
            ("node_modules", "node_modules", "node_modules", True),
            ("src/build/x.js", "x.js", "build", True),
            ("src/rebuild/x.js", "x.js", "build", False),
        ],
    )
    def test_matches_pattern(self, rel, name, pattern, expected):
        assert matches_pattern(rel, name, pattern) is expected

    def test_scanner_depth_and_excludes(self, temp_dir: Path):
        for rel in ["a/One.jsx", "a/b/c/Deep.jsx", "dist/Built.jsx"]:
            path = temp_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("", encoding="utf-8")

        found = FileScanner(exclude_patterns=["dist"], max_depth=2).find_files(temp_dir, ["**/*.jsx"])

        assert [p.relative_to(temp_dir).as_posix() for p in found] == ["a/One.jsx"]
