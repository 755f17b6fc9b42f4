"""Locator for React (JSX/TSX) projects."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .base import Locator

# Tried in order; the first hit names the file's component.
COMPONENT_PATTERNS = [
    re.compile(r"export\s+(?:default\s+)?function\s+([A-Z][A-Za-z0-9]*)"),
    re.compile(r"export\s+(?:default\s+)?class\s+([A-Z][A-Za-z0-9]*)"),
    re.compile(r"^\s*(?:async\s+)?function\s+([A-Z][A-Za-z0-9]*)", re.MULTILINE),
    re.compile(
        r"(?:const|let|var)\s+([A-Z][A-Za-z0-9]*)\s*(?::[^=\n]+)?=\s*"
        r"(?:async\s*)?(?:\(|function\b|(?:React\.)?(?:memo|forwardRef)\s*\()"
    ),
    re.compile(r"class\s+([A-Z][A-Za-z0-9]*)"),
]

USAGE_PATTERN = re.compile(r"<([A-Z][A-Za-z0-9]*(?:\.[A-Z][A-Za-z0-9]*)*)")
CLASSNAME_PATTERN = re.compile(r"\bclassName\s*=")
STYLE_PATTERN = re.compile(r"\bstyle\s*=\s*\{")


class ReactLocator(Locator):
    framework = "react"

    def extract_component_name(self, path: Path, content: str) -> Optional[str]:
        for pattern in COMPONENT_PATTERNS:
            match = pattern.search(content)
            if match:
                return match.group(1)
        stem = Path(path).stem
        if stem[:1].isupper():
            return stem
        return None

    def find_component_usages(self, path: Path, content: str) -> List[str]:
        names: List[str] = []
        for match in USAGE_PATTERN.finditer(content):
            base = match.group(1).split(".")[0]
            if base not in names:
                names.append(base)
        return names

    def additional_info(self, path: Path, line: str) -> dict:
        info: dict = {"module_type": "tsx" if str(path).endswith(".tsx") else "jsx"}
        class_match = CLASSNAME_PATTERN.search(line)
        if class_match:
            info["class_name_column"] = class_match.start() + 1
        style_match = STYLE_PATTERN.search(line)
        if style_match:
            info["style_column"] = style_match.start() + 1
        return info
