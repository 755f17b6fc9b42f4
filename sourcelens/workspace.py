"""Per-workspace wiring of the resolution and mutation services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .backup import BackupManager
from .config import ModificationConfig, ResolutionConfig
from .config_manager import load_config
from .models import (
    BackupInfo,
    ComponentHierarchy,
    ComponentMatch,
    ElementDescriptor,
    ElementSourceInfo,
    ElementStyleChanges,
    FrameworkDetectionResult,
    ModificationResult,
    SourceSearchOptions,
)
from .mutation import MutationService
from .resolution import SourceResolutionService

logger = logging.getLogger(__name__)


class Workspace:
    """Entry point bundling both services for one project root."""

    def __init__(
        self,
        root: Union[str, Path],
        resolution_config: Optional[ResolutionConfig] = None,
        modification_config: Optional[ModificationConfig] = None,
    ) -> None:
        self.root = Path(root).resolve()
        self.resolution = SourceResolutionService(self.root, resolution_config)
        self.mutation = MutationService(
            self.root,
            self.resolution,
            modification_config,
            BackupManager(self.root, modification_config),
        )

    @property
    def backups(self) -> BackupManager:
        return self.mutation.backup_manager

    def detect_framework(self, refresh: bool = False) -> Optional[FrameworkDetectionResult]:
        if refresh:
            return self.resolution.refresh_framework_detection()
        return self.resolution.get_detected_framework()

    def resolve_element_source(
        self, descriptor: Union[ElementDescriptor, Dict[str, Any]]
    ) -> Optional[ElementSourceInfo]:
        return self.resolution.find_element_source(descriptor)

    def build_hierarchy(self) -> Optional[ComponentHierarchy]:
        return self.resolution.build_component_hierarchy()

    def search_components(
        self,
        query: str,
        options: Optional[Union[SourceSearchOptions, Dict[str, Any]]] = None,
    ) -> List[ComponentMatch]:
        return self.resolution.search_components(query, options)

    def apply_style_changes(
        self, changes: Union[ElementStyleChanges, Dict[str, Any]]
    ) -> ModificationResult:
        return self.mutation.apply_style_changes(changes)

    def rollback_changes(self, file_path: Union[str, Path], timestamp: Optional[int] = None) -> bool:
        return self.mutation.rollback_changes(file_path, timestamp)

    def get_backup_history(self, file_path: Union[str, Path]) -> List[BackupInfo]:
        return self.mutation.get_backup_history(file_path)


def open_workspace(
    root: Union[str, Path],
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Workspace:
    """Create a :class:`Workspace` using the layered TOML configuration.

    Args:
        root: Project root directory
        overrides: Optional ``{"resolution": {...}, "modification": {...}}``

    Returns:
        Configured Workspace
    """
    resolution_config, modification_config = load_config(Path(root), overrides)
    logger.debug("Opening workspace %s", root)
    return Workspace(root, resolution_config, modification_config)
