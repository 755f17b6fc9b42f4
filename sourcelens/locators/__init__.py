"""Per-framework element locators."""

from __future__ import annotations

from typing import Dict, Optional

from ..scanner import FileScanner
from .angular import AngularLocator
from .base import Locator, match_score
from .html import HtmlLocator
from .react import ReactLocator
from .vue import VueLocator

LOCATORS = {
    "react": ReactLocator,
    "vue": VueLocator,
    "angular": AngularLocator,
    "html": HtmlLocator,
}


def create_locators(
    scanner: Optional[FileScanner] = None, search_mode: str = "first-match"
) -> Dict[str, Locator]:
    """Instantiate one locator per framework sharing *scanner*."""
    scanner = scanner or FileScanner()
    return {name: cls(scanner, search_mode) for name, cls in LOCATORS.items()}


__all__ = [
    "AngularLocator",
    "HtmlLocator",
    "LOCATORS",
    "Locator",
    "ReactLocator",
    "VueLocator",
    "create_locators",
    "match_score",
]
