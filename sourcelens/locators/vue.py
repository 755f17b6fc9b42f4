"""Locator for Vue single-file components.

Only the ``<template>`` block is scanned for markup; component names come
from an explicit ``name:`` option or the file name.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .base import Locator, pascal_case

NAME_OPTION = re.compile(r"""\bname\s*:\s*['"]([A-Za-z][\w-]*)['"]""")
PASCAL_TAG = re.compile(r"<([A-Z][A-Za-z0-9]*)")
KEBAB_TAG = re.compile(r"<([a-z][a-z0-9]*(?:-[a-z0-9]+)+)")


def template_range(lines: List[str]) -> Optional[Tuple[int, int]]:
    """Inclusive (start, end) line indexes of the outer template block."""
    start = next((i for i, line in enumerate(lines) if "<template" in line), None)
    if start is None:
        return None
    end = max((i for i, line in enumerate(lines) if "</template>" in line), default=len(lines) - 1)
    return start, max(start, end)


class VueLocator(Locator):
    framework = "vue"
    declaration_keywords = ("name", "export default", "defineComponent")

    def scannable_lines(self, path: Path, lines: List[str]) -> Iterable[Tuple[int, str]]:
        bounds = template_range(lines)
        if bounds is None:
            return []
        start, end = bounds
        return ((i, lines[i]) for i in range(start, end + 1))

    def extract_component_name(self, path: Path, content: str) -> Optional[str]:
        script_at = content.find("<script")
        if script_at != -1:
            match = NAME_OPTION.search(content, script_at)
            if match:
                return pascal_case(match.group(1))
        return pascal_case(Path(path).stem) or None

    def find_component_usages(self, path: Path, content: str) -> List[str]:
        lines = content.split("\n")
        names: List[str] = []
        for _, line in self.scannable_lines(path, lines):
            for match in list(PASCAL_TAG.finditer(line)) + list(KEBAB_TAG.finditer(line)):
                name = pascal_case(match.group(1))
                if name not in names:
                    names.append(name)
        return names

    def additional_info(self, path: Path, line: str) -> dict:
        return {"module_type": "vue"}
