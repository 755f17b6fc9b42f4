"""Element-to-source resolution for one workspace.

The service detects the workspace's framework on first use, dispatches to
the matching locator and caches non-null results. Every public operation
degrades to ``None`` / ``[]`` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .cache import ResultCache, element_cache_key, hierarchy_cache_key
from .config import ResolutionConfig, known_settings, snake_case
from .config_manager import apply_settings
from .framework_detector import FrameworkDetector
from .locators import Locator, create_locators
from .models import (
    ComponentHierarchy,
    ComponentMatch,
    ElementDescriptor,
    ElementSourceInfo,
    FrameworkDetectionResult,
    SourceSearchOptions,
)
from .scanner import FileScanner

logger = logging.getLogger(__name__)


class SourceResolutionService:
    """Resolve captured elements to source locations within a workspace."""

    def __init__(
        self,
        workspace_root: Optional[Union[str, Path]],
        config: Optional[ResolutionConfig] = None,
        detector: Optional[FrameworkDetector] = None,
        cache: Optional[ResultCache] = None,
        locators: Optional[Dict[str, Locator]] = None,
    ) -> None:
        self.workspace_root = Path(workspace_root).resolve() if workspace_root else None
        self.config = config or ResolutionConfig()
        self.detector = detector or FrameworkDetector()
        self.cache = cache or ResultCache(max_size=self.config.max_cache_size)
        self.locators = locators or self._build_locators()
        self._detected: Optional[FrameworkDetectionResult] = None

    def _build_locators(self) -> Dict[str, Locator]:
        scanner = FileScanner(self.config.exclude_patterns, self.config.max_depth)
        return create_locators(scanner, self.config.search_mode)

    @property
    def has_workspace(self) -> bool:
        return self.workspace_root is not None and self.workspace_root.is_dir()

    def _debug(self, message: str, *args: Any) -> None:
        if self.config.debug_mode:
            logger.debug(message, *args)

    # ------------------------------------------------------------------
    # Framework
    # ------------------------------------------------------------------

    def _ensure_framework(self) -> Optional[FrameworkDetectionResult]:
        if self._detected is None and self.has_workspace:
            self._detected = self.detector.detect_framework(self.workspace_root)
            self._debug("Framework detected: %s", self._detected)
        return self._detected

    def get_detected_framework(self) -> Optional[FrameworkDetectionResult]:
        """Current detection result, detecting lazily on first call."""
        return self._ensure_framework()

    def refresh_framework_detection(self) -> Optional[FrameworkDetectionResult]:
        """Re-run detection; cached results are dropped if the framework changed."""
        previous = self._detected
        self._detected = None
        current = self._ensure_framework()
        if previous is not None and (current is None or current.framework != previous.framework):
            self.cache.clear()
        return current

    def _locator(self) -> Optional[Locator]:
        detected = self._ensure_framework()
        if detected is None:
            return None
        return self.locators.get(detected.framework)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def find_element_source(
        self, descriptor: Union[ElementDescriptor, Dict[str, Any]]
    ) -> Optional[ElementSourceInfo]:
        """Locate the source line that renders *descriptor*."""
        if isinstance(descriptor, dict):
            descriptor = ElementDescriptor.from_dict(descriptor)
        locator = self._locator()
        if locator is None:
            return None

        try:
            key = element_cache_key(descriptor)
            if self.config.cache_results:
                cached = self.cache.get(key)
                if cached is not None:
                    self._debug("Cache hit for element: %s", key)
                    return cached

            source_info = locator.find_element_source(descriptor, self.workspace_root)
            if source_info is not None and self.config.cache_results:
                self.cache.set(key, source_info, self.config.cache_ttl)
            self._debug("Source found: %s", source_info)
            return source_info
        except Exception as exc:
            logger.error("Element source detection failed: %s", exc)
            return None

    def build_component_hierarchy(self) -> Optional[ComponentHierarchy]:
        """Root of the workspace's component graph, or None."""
        locator = self._locator()
        if locator is None:
            return None

        try:
            key = hierarchy_cache_key(locator.framework)
            if self.config.cache_results:
                cached = self.cache.get(key)
                if cached is not None:
                    return cached

            hierarchy = locator.build_component_hierarchy(self.workspace_root)
            if hierarchy is not None and self.config.cache_results:
                self.cache.set(key, hierarchy, self.config.cache_ttl)
            return hierarchy
        except Exception as exc:
            logger.error("Component hierarchy building failed: %s", exc)
            return None

    def search_components(
        self,
        query: str,
        options: Optional[Union[SourceSearchOptions, Dict[str, Any]]] = None,
    ) -> List[ComponentMatch]:
        """Search component names; results are sorted by confidence."""
        locator = self._locator()
        if locator is None:
            return []

        try:
            if isinstance(options, SourceSearchOptions):
                search_options = options
            else:
                search_options = SourceSearchOptions(
                    root_path=str(self.workspace_root),
                    exclude_patterns=list(self.config.exclude_patterns),
                    max_depth=self.config.max_depth,
                )
                if options:
                    search_options = replace(
                        search_options,
                        **known_settings(SourceSearchOptions, options, "search options"),
                    )
            results = locator.search_components(query, search_options)
        except Exception as exc:
            logger.error("Component search failed: %s", exc)
            return []
        return sorted(results, key=lambda m: m.confidence, reverse=True)

    def clear_cache(self) -> None:
        self.cache.clear()

    def update_config(self, **changes: Any) -> None:
        """Apply setting changes; locators are rebuilt when scanning changes.

        Unknown keys and invalid values are logged and ignored.
        """
        self.config = apply_settings(self.config, changes, "update_config")
        changed = {snake_case(key) for key in changes}
        if {"search_mode", "exclude_patterns", "max_depth"} & changed:
            self.locators = self._build_locators()
            self.cache.clear()
        if "max_cache_size" in changed:
            self.cache.max_size = self.config.max_cache_size
