"""Locator for Angular components.

Markup lives in ``*.component.html`` templates or in inline ``template:``
strings of ``*.component.ts`` files. A template belongs to the
``@Component`` class of its companion ``.ts`` file; usages are resolved
through each component's element ``selector``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..scanner import read_text
from .base import Locator, pascal_case

DECORATED_CLASS = re.compile(r"@Component\s*\((?:.|\n)*?export\s+class\s+([A-Z]\w*)")
EXPORTED_CLASS = re.compile(r"export\s+class\s+([A-Z]\w*)")
SELECTOR = re.compile(r"""selector\s*:\s*['"]([a-z][\w-]*)['"]""")
INLINE_TEMPLATE = re.compile(r"template\s*:\s*`")
ELEMENT_TAG = re.compile(r"<([a-z][\w-]*)")

TS_SUFFIX = ".component.ts"
HTML_SUFFIX = ".component.html"


class AngularLocator(Locator):
    framework = "angular"
    declaration_keywords = ("class",)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._selectors: Dict[str, str] = {}

    def declares_component(self, path: Path) -> bool:
        return str(path).endswith(TS_SUFFIX)

    def scannable_lines(self, path: Path, lines: List[str]) -> Iterable[Tuple[int, str]]:
        if not str(path).endswith(TS_SUFFIX):
            return enumerate(lines)
        return self._inline_template_lines(lines)

    @staticmethod
    def _inline_template_lines(lines: List[str]) -> Iterable[Tuple[int, str]]:
        inside = False
        for index, line in enumerate(lines):
            if not inside:
                opening = INLINE_TEMPLATE.search(line)
                if opening is None:
                    continue
                yield index, line
                inside = "`" not in line[opening.end():]
            else:
                yield index, line
                if "`" in line:
                    inside = False

    def extract_component_name(self, path: Path, content: str) -> Optional[str]:
        path = Path(path)
        if str(path).endswith(HTML_SUFFIX):
            companion = Path(str(path)[: -len(HTML_SUFFIX)] + TS_SUFFIX)
            try:
                content = read_text(companion)
            except (OSError, UnicodeDecodeError):
                stem = path.name[: -len(HTML_SUFFIX)]
                return pascal_case(stem) + "Component"
        match = DECORATED_CLASS.search(content) or EXPORTED_CLASS.search(content)
        if match:
            return match.group(1)
        return None

    def prepare(self, files: List[Path]) -> None:
        self._selectors = {}
        for path in files:
            if not self.declares_component(path):
                continue
            try:
                content = read_text(path)
            except (OSError, UnicodeDecodeError):
                continue
            selector = SELECTOR.search(content)
            name = self.extract_component_name(path, content)
            if selector and name:
                self._selectors[selector.group(1)] = name

    def find_component_usages(self, path: Path, content: str) -> List[str]:
        names: List[str] = []
        for _, line in self.scannable_lines(path, content.split("\n")):
            for match in ELEMENT_TAG.finditer(line):
                name = self._selectors.get(match.group(1))
                if name and name not in names:
                    names.append(name)
        return names

    def additional_info(self, path: Path, line: str) -> dict:
        return {"module_type": "angular"}
