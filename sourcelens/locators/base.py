"""Shared locator contract and the line-scanning algorithm."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..hierarchy import HierarchyBuilder
from ..models import (
    ComponentHierarchy,
    ComponentMatch,
    ElementDescriptor,
    ElementSourceInfo,
    MatchContext,
    MatchLocation,
    SourceSearchOptions,
)
from ..rules import SYNTAX, FrameworkSyntax, LineMatch, classify_element, score_line
from ..scanner import FileScanner, read_text

logger = logging.getLogger(__name__)

SEARCH_THRESHOLD = 0.3


def match_score(query: str, target: str) -> Tuple[float, str]:
    """Score a component name against a search query.

    Exact (1.0), substring (0.8), else the share of query characters found
    in the target, scaled by 0.6 when above one half.
    """
    query_lower = query.lower()
    target_lower = target.lower()
    if not query_lower:
        return 0.0, "fuzzy"
    if query_lower == target_lower:
        return 1.0, "exact"
    if query_lower in target_lower:
        return 0.8, "partial"

    overlap = sum(1 for ch in query_lower if ch in target_lower)
    ratio = overlap / len(query_lower)
    if ratio > 0.5:
        return round(ratio * 0.6, 4), "fuzzy"
    return 0.0, "fuzzy"


def pascal_case(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_.\s]+", name) if part)


class Locator(ABC):
    """Per-framework strategy mapping descriptors to source locations."""

    framework: str = ""
    declaration_keywords: Tuple[str, ...] = ("function", "const", "class")

    def __init__(self, scanner: Optional[FileScanner] = None, search_mode: str = "first-match") -> None:
        self.scanner = scanner or FileScanner()
        self.search_mode = search_mode

    @property
    def syntax(self) -> FrameworkSyntax:
        return SYNTAX[self.framework]

    # ------------------------------------------------------------------
    # Framework hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def extract_component_name(self, path: Path, content: str) -> Optional[str]:
        """Name of the component declared by *path*, or None."""
        ...

    @abstractmethod
    def find_component_usages(self, path: Path, content: str) -> List[str]:
        """Names of known components rendered by *path*."""
        ...

    def scannable_lines(self, path: Path, lines: List[str]) -> Iterable[Tuple[int, str]]:
        """(0-based index, line) pairs that may contain markup."""
        return enumerate(lines)

    def declares_component(self, path: Path) -> bool:
        return True

    def prepare(self, files: List[Path]) -> None:
        """Hook run before hierarchy building or usage scanning."""

    def additional_info(self, path: Path, line: str) -> dict:
        return {}

    # ------------------------------------------------------------------
    # Element source lookup
    # ------------------------------------------------------------------

    def candidate_files(self, root: Path, options: Optional[SourceSearchOptions] = None) -> List[Path]:
        if options is None:
            return self.scanner.find_files(root, self.syntax.file_patterns)
        includes = options.include_patterns or list(self.syntax.file_patterns)
        scanner = FileScanner(options.exclude_patterns, options.max_depth)
        return scanner.find_files(root, includes)

    def find_element_source(
        self, descriptor: ElementDescriptor, workspace_root: Path
    ) -> Optional[ElementSourceInfo]:
        """Return the matching source location, or None.

        In ``first-match`` mode the first matching line of the first file
        wins; ``best-match`` scans every file and keeps the highest score.
        """
        best_only = self.search_mode == "best-match"
        best: Optional[ElementSourceInfo] = None
        try:
            for path in self.candidate_files(Path(workspace_root)):
                info = self.search_element_in_file(descriptor, path, best_only=best_only)
                if info is None:
                    continue
                if not best_only:
                    return info
                if best is None or info.confidence > best.confidence:
                    best = info
        except Exception as exc:
            logger.error("[%s] Element source detection failed: %s", self.framework, exc)
            return None
        return best

    def search_element_in_file(
        self, descriptor: ElementDescriptor, path: Path, best_only: bool = False
    ) -> Optional[ElementSourceInfo]:
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("[%s] Failed to search in file %s: %s", self.framework, path, exc)
            return None

        lines = content.split("\n")
        best: Optional[Tuple[int, str, LineMatch]] = None
        for index, line in self.scannable_lines(path, lines):
            if self.syntax.is_comment(line):
                continue
            match = score_line(descriptor, line, self.syntax)
            if match is None:
                continue
            if not best_only:
                best = (index, line, match)
                break
            if best is None or match.confidence > best[2].confidence:
                best = (index, line, match)

        if best is None:
            return None
        index, line, match = best
        return ElementSourceInfo(
            file_path=str(path),
            line_number=index + 1,
            column_number=match.column,
            component_name=self.extract_component_name(path, content) or "Unknown",
            framework=self.framework,  # type: ignore[arg-type]
            element_type=classify_element(descriptor.tag_name),  # type: ignore[arg-type]
            confidence=match.confidence,
            additional_info={"matched_rules": match.matched_rules, **self.additional_info(path, line)},
        )

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def build_component_hierarchy(self, workspace_root: Path) -> Optional[ComponentHierarchy]:
        """Return the first root component, or None."""
        try:
            files = self.candidate_files(Path(workspace_root))
            self.prepare(files)
            builder = HierarchyBuilder(
                self.framework,
                self.extract_component_name,
                self.find_component_usages,
                self.declares_component,
            )
            roots = builder.build(files)
        except Exception as exc:
            logger.error("[%s] Component hierarchy building failed: %s", self.framework, exc)
            return None
        return roots[0] if roots else None

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_components(self, query: str, options: SourceSearchOptions) -> List[ComponentMatch]:
        if options.frameworks and self.framework not in options.frameworks:
            return []
        matches: List[ComponentMatch] = []
        try:
            files = self.candidate_files(Path(options.root_path), options)
            self.prepare(files)
            for path in files:
                match = self._search_file(query, path)
                if match is not None:
                    matches.append(match)
        except Exception as exc:
            logger.error("[%s] Component search failed: %s", self.framework, exc)
            return []
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches

    def _search_file(self, query: str, path: Path) -> Optional[ComponentMatch]:
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError):
            return None
        if not self.declares_component(path):
            return None
        name = self.extract_component_name(path, content)
        if not name:
            return None
        score, match_type = match_score(query, name)
        if score <= SEARCH_THRESHOLD:
            return None

        lines = content.split("\n")
        line_no, column = self.find_declaration_line(lines, name)
        return ComponentMatch(
            file_path=str(path),
            component_name=name,
            framework=self.framework,  # type: ignore[arg-type]
            confidence=score,
            match_type=match_type,  # type: ignore[arg-type]
            location=MatchLocation(
                line=line_no,
                column=column,
                end_line=line_no,
                end_column=column + len(name),
            ),
            context=MatchContext(
                before_lines=lines[max(0, line_no - 3):line_no - 1],
                matched_lines=[lines[line_no - 1]] if line_no <= len(lines) else [],
                after_lines=lines[line_no:line_no + 3],
            ),
        )

    def find_declaration_line(self, lines: List[str], name: str) -> Tuple[int, int]:
        for index, line in enumerate(lines):
            if name in line and any(k in line for k in self.declaration_keywords):
                return index + 1, line.index(name) + 1
        return 1, 1
