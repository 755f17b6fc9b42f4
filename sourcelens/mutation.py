"""Style mutation orchestration: resolve, check conflicts, back up, rewrite, notify."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .backup import BackupManager
from .config import ModificationConfig, snake_case
from .config_manager import apply_settings
from .conflicts import ConflictDetector
from .errors import ConflictDetected, NoSourceMatch, SourceLensError, UnsupportedFramework
from .models import (
    BackupInfo,
    ChangeEvent,
    ConflictDetection,
    ElementStyleChanges,
    ModificationResult,
    RollbackInfo,
)
from .mutators import create_mutator
from .resolution import SourceResolutionService
from .scanner import write_text

logger = logging.getLogger(__name__)

ChangeListener = Callable[[ChangeEvent], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class MutationService:
    """Apply and roll back style changes for one workspace.

    Every public method returns a result value; errors are reported in the
    result rather than raised. Work on the same file is serialized.
    """

    def __init__(
        self,
        workspace_root: Union[str, Path],
        resolution: SourceResolutionService,
        config: Optional[ModificationConfig] = None,
        backup_manager: Optional[BackupManager] = None,
    ) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.resolution = resolution
        self.config = config or ModificationConfig()
        self.backup_manager = backup_manager or BackupManager(self.workspace_root, self.config)
        self.conflict_detector = ConflictDetector(self.backup_manager)
        self._listeners: List[ChangeListener] = []
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_path(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.workspace_root / path
        return path.resolve()

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(str(path), threading.Lock())

    def _notify(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.error("Change listener failed: %s", exc)

    def _with_source(self, changes: ElementStyleChanges) -> ElementStyleChanges:
        if changes.source_info is None:
            source = self.resolution.find_element_source(changes.to_descriptor())
            if source is None:
                raise NoSourceMatch("Could not find source location for element")
            changes = replace(changes, source_info=source.to_location())
        path = self._resolve_path(changes.source_info.file_path)
        return replace(changes, source_info=replace(changes.source_info, file_path=str(path)))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply_style_changes(
        self, changes: Union[ElementStyleChanges, Dict[str, Any]]
    ) -> ModificationResult:
        """Rewrite the source of an element so it carries ``changes.styles``."""
        try:
            if isinstance(changes, dict):
                changes = ElementStyleChanges.from_dict(changes)
            changes = self._with_source(changes)
            path = Path(changes.source_info.file_path)
            with self._lock_for(path):
                return self._apply_locked(changes, path)
        except SourceLensError as exc:
            return ModificationResult.failure(exc)
        except Exception as exc:
            logger.exception("Style modification failed")
            return ModificationResult.failure(exc)

    def _apply_locked(self, changes: ElementStyleChanges, path: Path) -> ModificationResult:
        conflicts = self.conflict_detector.detect(path)
        if conflicts.has_conflicts and self.config.conflict_resolution == "cancel":
            logger.info("Cancelled modification of %s: file changed since last backup", path)
            result = ModificationResult.failure(
                ConflictDetected("Conflicts detected and resolution policy is 'cancel'")
            )
            result.conflicts = conflicts
            return result

        detected = self.resolution.get_detected_framework()
        framework = detected.framework if detected else "unknown"
        mutator = create_mutator(framework, self.backup_manager, self.config.class_stylesheet)
        if mutator is None:
            raise UnsupportedFramework(f"Style modification is not supported for {framework} projects")

        result = mutator.apply_styles(changes, self.config.preferred_update_method)
        if conflicts.has_conflicts:
            result.conflicts = conflicts
        if not result.success:
            return result

        for modification in result.rollback_info.modifications:
            self.backup_manager.record_write(modification.file_path, modification.modified_content)

        self._notify(
            ChangeEvent(
                type="styles-updated",
                file_path=str(path),
                changes=dict(changes.styles),
                timestamp=_now_ms(),
            )
        )
        if self.config.enable_live_reload:
            for file_path in result.modified_files:
                self._notify(ChangeEvent("file-changed", file_path, {}, _now_ms()))
        return result

    def detect_conflicts(self, changes: Union[ElementStyleChanges, Dict[str, Any]]) -> ConflictDetection:
        if isinstance(changes, dict):
            changes = ElementStyleChanges.from_dict(changes)
        if changes.source_info is None:
            return ConflictDetection(has_conflicts=False)
        return self.conflict_detector.detect(self._resolve_path(changes.source_info.file_path))

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def rollback_changes(self, file_path: Union[str, Path], timestamp: Optional[int] = None) -> bool:
        """Restore *file_path* from its latest backup or the one at *timestamp*."""
        path = self._resolve_path(file_path)
        try:
            with self._lock_for(path):
                if not self.backup_manager.restore_from_backup(path, timestamp):
                    return False
                self.backup_manager.record_write(path, path.read_bytes())
        except OSError as exc:
            logger.error("Rollback of %s failed: %s", path, exc)
            return False

        self._notify(ChangeEvent("file-changed", str(path), {}, _now_ms()))
        return True

    def rollback_modification(self, rollback_info: RollbackInfo) -> bool:
        """Write back the original contents captured in *rollback_info*."""
        if not rollback_info.can_rollback:
            return False
        restored = []
        try:
            for modification in reversed(rollback_info.modifications):
                path = self._resolve_path(modification.file_path)
                with self._lock_for(path):
                    write_text(path, modification.original_content)
                    self.backup_manager.record_write(path, modification.original_content)
                restored.append(str(path))
        except OSError as exc:
            logger.error("Rollback failed after restoring %d file(s): %s", len(restored), exc)
            return False

        for file_path in restored:
            self._notify(ChangeEvent("file-changed", file_path, {}, _now_ms()))
        return True

    # ------------------------------------------------------------------
    # Queries, listeners, configuration
    # ------------------------------------------------------------------

    def get_backup_history(self, file_path: Union[str, Path]) -> List[BackupInfo]:
        return self.backup_manager.get_backup_history(self._resolve_path(file_path))

    def get_backup_stats(self) -> dict:
        return self.backup_manager.get_backup_stats()

    def add_change_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update_config(self, **changes: Any) -> None:
        """Apply setting changes.

        A new ``backup_directory`` swaps the backup manager; history for the
        new directory is loaded from its manifest. Unknown keys and invalid
        values are logged and ignored.
        """
        self.config = apply_settings(self.config, changes, "update_config")
        if "backup_directory" in {snake_case(key) for key in changes}:
            self.backup_manager = BackupManager(self.workspace_root, self.config)
            self.conflict_detector = ConflictDetector(self.backup_manager)
        else:
            self.backup_manager.config = self.config
