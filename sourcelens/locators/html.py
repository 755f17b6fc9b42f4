"""Fallback locator for static HTML pages."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..models import ComponentHierarchy, ComponentMatch, ElementDescriptor, ElementSourceInfo, SourceSearchOptions
from ..scanner import read_text
from .base import Locator

logger = logging.getLogger(__name__)

STATIC_CONFIDENCE = 0.8


class HtmlLocator(Locator):
    """Substring matching on tag, id and the full class attribute."""

    framework = "html"

    def extract_component_name(self, path: Path, content: str) -> Optional[str]:
        return None

    def find_component_usages(self, path: Path, content: str) -> List[str]:
        return []

    def search_element_in_file(
        self, descriptor: ElementDescriptor, path: Path, best_only: bool = False
    ) -> Optional[ElementSourceInfo]:
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read HTML file %s: %s", path, exc)
            return None

        opening = f"<{descriptor.tag_name.lower()}"
        for index, line in enumerate(content.split("\n")):
            if opening not in line.lower():
                continue
            if descriptor.id and f'id="{descriptor.id}"' not in line:
                continue
            if descriptor.class_name and f'class="{descriptor.class_name}"' not in line:
                continue
            return ElementSourceInfo(
                file_path=str(path),
                line_number=index + 1,
                column_number=line.lower().index(opening) + 1,
                component_name=descriptor.tag_name,
                framework="html",
                element_type="element",
                confidence=STATIC_CONFIDENCE,
                additional_info={"module_type": "html"},
            )
        return None

    def build_component_hierarchy(self, workspace_root: Path) -> Optional[ComponentHierarchy]:
        return None

    def search_components(self, query: str, options: SourceSearchOptions) -> List[ComponentMatch]:
        return []
