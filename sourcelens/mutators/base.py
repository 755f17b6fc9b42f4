"""Backup-then-write skeleton shared by style mutators."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..backup import BackupManager
from ..errors import OutOfRangeLine, SourceLensError
from ..models import (
    ElementStyleChanges,
    FileModification,
    ModificationResult,
    RollbackInfo,
)
from ..scanner import read_text, write_text

logger = logging.getLogger(__name__)

CLASS_PREFIX = "sourcelens-dynamic-"
BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36[rem])
    return "".join(reversed(digits))


def string_hash(text: str) -> int:
    """32-bit ``(h << 5) - h + code`` hash over UTF-16 code units."""
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + code) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def generate_class_name(styles: Dict[str, str]) -> str:
    """Deterministic class name for a style set (order-independent)."""
    signature = ";".join(f"{key}:{value}" for key, value in sorted(styles.items()))
    return CLASS_PREFIX + _to_base36(abs(string_hash(signature)))


def css_rule(class_name: str, styles: Dict[str, str]) -> str:
    body = " ".join(f"{prop}: {value};" for prop, value in styles.items())
    return f".{class_name} {{ {body} }}"


def target_line_index(lines: List[str], line_number: int) -> int:
    index = line_number - 1
    if index < 0 or index >= len(lines):
        raise OutOfRangeLine(f"Target line {line_number} is out of range (file has {len(lines)} lines)")
    return index


class StyleMutator(ABC):
    """Apply style edits to one source line, backing the file up first.

    Either the rewritten content is written in full or nothing is written.
    """

    framework: str = ""

    def __init__(self, backup_manager: BackupManager, class_stylesheet: Optional[str] = None) -> None:
        self.backup_manager = backup_manager
        self.class_stylesheet = class_stylesheet

    @abstractmethod
    def determine_strategy(self, content: str, changes: ElementStyleChanges) -> str:
        ...

    @abstractmethod
    def apply_inline_styles(self, content: str, changes: ElementStyleChanges) -> str:
        """Return *content* with the styles inlined on the target element."""
        ...

    @abstractmethod
    def apply_class_styles(self, content: str, changes: ElementStyleChanges, class_name: str) -> str:
        """Return *content* with *class_name* attached to the target element."""
        ...

    def apply_styles(self, changes: ElementStyleChanges, strategy: str = "auto") -> ModificationResult:
        if changes.source_info is None:
            return ModificationResult(
                success=False,
                error=f"Source information is required for {self.framework} modifications",
                error_code="no-source-match",
            )

        file_path = Path(changes.source_info.file_path)
        try:
            original = read_text(file_path)

            selected = self.determine_strategy(original, changes) if strategy == "auto" else strategy
            stylesheet_update: Optional[Tuple[Path, Optional[str], str]] = None
            if selected == "inline-style":
                modified = self.apply_inline_styles(original, changes)
            else:
                selected = "css-class"
                class_name = generate_class_name(changes.styles)
                modified = self.apply_class_styles(original, changes, class_name)
                stylesheet_update = self._plan_stylesheet(class_name, changes.styles)

            # back up only once the rewrite has succeeded
            backup = self.backup_manager.create_backup(file_path, f"{self.framework} style modification")
            modifications = [
                FileModification(
                    file_path=str(file_path),
                    original_content=original,
                    modified_content=modified,
                    change_type=selected,  # type: ignore[arg-type]
                    timestamp=int(time.time() * 1000),
                    backup_path=backup.backup_path,
                )
            ]
            backup_files = [backup.backup_path]

            sheet_backup = None
            if stylesheet_update is not None:
                sheet_path, sheet_original, _ = stylesheet_update
                if sheet_original is not None:
                    sheet_backup = self.backup_manager.create_backup(sheet_path, "Dynamic class stylesheet")
                    backup_files.append(sheet_backup.backup_path)

            write_text(file_path, modified)
            if stylesheet_update is not None:
                self._write_stylesheet(stylesheet_update, file_path, original)
                sheet_path, sheet_original, sheet_content = stylesheet_update
                modifications.append(
                    FileModification(
                        file_path=str(sheet_path),
                        original_content=sheet_original or "",
                        modified_content=sheet_content,
                        change_type="css-class",
                        timestamp=int(time.time() * 1000),
                        backup_path=sheet_backup.backup_path if sheet_backup else None,
                    )
                )
        except SourceLensError as exc:
            return ModificationResult.failure(exc)
        except (OSError, UnicodeDecodeError) as exc:
            return ModificationResult.failure(exc)

        return ModificationResult(
            success=True,
            modified_files=[m.file_path for m in modifications],
            backup_files=backup_files,
            applied_styles=dict(changes.styles),
            rollback_info=RollbackInfo(modifications=modifications, can_rollback=True),
        )

    # ------------------------------------------------------------------
    # Optional stylesheet for class-based edits
    # ------------------------------------------------------------------

    def _plan_stylesheet(
        self, class_name: str, styles: Dict[str, str]
    ) -> Optional[Tuple[Path, Optional[str], str]]:
        """(path, current content or None, new content), or None if nothing to write."""
        if not self.class_stylesheet:
            return None
        path = self.backup_manager.workspace_root / self.class_stylesheet
        current = read_text(path) if path.exists() else None
        if current is not None and f".{class_name} {{" in current:
            return None
        prefix = current or ""
        if prefix and not prefix.endswith("\n"):
            prefix += "\n"
        return path, current, prefix + css_rule(class_name, styles) + "\n"

    def _write_stylesheet(
        self, update: Tuple[Path, Optional[str], str], source_path: Path, source_original: str
    ) -> None:
        sheet_path, _, content = update
        try:
            sheet_path.parent.mkdir(parents=True, exist_ok=True)
            write_text(sheet_path, content)
        except OSError:
            write_text(source_path, source_original)
            raise
