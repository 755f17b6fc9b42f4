"""Deterministic workspace file discovery."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


def matches_pattern(rel_path: str, name: str, pattern: str) -> bool:
    """Glob-like match of *pattern* against a relative path or entry name.

    ``**/`` prefixes match at any depth. Patterns without wildcards match
    an exact entry name or any exact path segment.
    """
    rel_path = rel_path.replace(os.sep, "/")
    if any(ch in pattern for ch in "*?["):
        candidates = [pattern]
        if pattern.startswith("**/"):
            candidates.append(pattern[3:])
        return any(
            fnmatch.fnmatchcase(rel_path, p) or fnmatch.fnmatchcase(name, p)
            for p in candidates
        )
    return name == pattern or pattern in rel_path.split("/")


class FileScanner:
    """Walk a workspace in sorted order, applying include/exclude patterns."""

    def __init__(self, exclude_patterns: Sequence[str] = (), max_depth: int = 10) -> None:
        self.exclude_patterns = list(exclude_patterns)
        self.max_depth = max_depth

    def find_files(
        self,
        root: Path,
        include_patterns: Iterable[str],
        exclude_patterns: Sequence[str] = (),
    ) -> List[Path]:
        root = Path(root)
        includes = list(include_patterns)
        excludes = list(self.exclude_patterns) + list(exclude_patterns)
        results: List[Path] = []
        self._walk(root, root, includes, excludes, 0, results)
        return results

    def _walk(
        self,
        root: Path,
        directory: Path,
        includes: List[str],
        excludes: List[str],
        depth: int,
        results: List[Path],
    ) -> None:
        if depth > self.max_depth:
            return
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Cannot read directory %s: %s", directory, exc)
            return

        for entry in entries:
            full_path = Path(entry.path)
            rel_path = str(full_path.relative_to(root))
            if any(matches_pattern(rel_path, entry.name, p) for p in excludes):
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                self._walk(root, full_path, includes, excludes, depth + 1, results)
            elif any(matches_pattern(rel_path, entry.name, p) for p in includes):
                results.append(full_path)


def has_files_with_extensions(root: Path, extensions: Sequence[str], max_depth: int = 3) -> bool:
    """Return True if any file under *root* ends with one of *extensions*.

    Dot-directories and ``node_modules`` are skipped; the search stops
    ``max_depth`` directories below the root.
    """

    def _check(directory: Path, depth: int) -> bool:
        if depth > max_depth:
            return False
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError:
            return False
        for entry in entries:
            if entry.name.startswith(".") or entry.name == "node_modules":
                continue
            if entry.is_file() and any(entry.name.endswith(ext) for ext in extensions):
                return True
            if entry.is_dir() and _check(Path(entry.path), depth + 1):
                return True
        return False

    return _check(Path(root), 0)


def read_text(path: Path) -> str:
    """Read a source file as UTF-8 without newline translation."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
