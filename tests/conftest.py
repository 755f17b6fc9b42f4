"""Pytest configuration and fixtures for sourcelens tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.sourcelens/config.toml."""
    monkeypatch.setattr("sourcelens.config_manager.CONFIG_FILE", tmp_path / "home" / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_react_app_path() -> Path:
    """Get path to the sample React project."""
    return Path(__file__).parent / "fixtures" / "sample_react_app"


@pytest.fixture
def react_app(temp_dir: Path, sample_react_app_path: Path) -> Path:
    """Writable copy of the sample React project."""
    target = temp_dir / "app"
    shutil.copytree(sample_react_app_path, target)
    return target.resolve()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def write_files(root: Path, files: dict) -> Path:
    """Create ``{relative_path: content}`` under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root
