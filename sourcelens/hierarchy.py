"""Two-pass component graph construction from per-file declarations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .models import ComponentHierarchy
from .scanner import read_text

logger = logging.getLogger(__name__)

NameFn = Callable[[Path, str], Optional[str]]
UsageFn = Callable[[Path, str], List[str]]
DeclaresFn = Callable[[Path], bool]


class HierarchyBuilder:
    """Link component nodes by the tags each file renders.

    Pass 1 creates one node per declaring file. Pass 2 scans every file for
    component usages and makes the using file's node the parent of each
    used node. Self-references are ignored; mutual references are kept, so
    traversals rely on :meth:`ComponentHierarchy.walk` for cycle safety.
    """

    def __init__(
        self,
        framework: str,
        component_name: NameFn,
        component_usages: UsageFn,
        declares_component: Optional[DeclaresFn] = None,
    ) -> None:
        self.framework = framework
        self.component_name = component_name
        self.component_usages = component_usages
        self.declares_component = declares_component or (lambda _path: True)

    def build(self, files: Iterable[Path]) -> List[ComponentHierarchy]:
        """Return the root nodes (no parent) in file order."""
        sources: Dict[Path, str] = {}
        for path in files:
            try:
                sources[path] = read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)

        nodes: Dict[str, ComponentHierarchy] = {}
        for path, content in sources.items():
            if not self.declares_component(path):
                continue
            name = self.component_name(path, content)
            if name and name not in nodes:
                nodes[name] = ComponentHierarchy(
                    component_name=name,
                    file_path=str(path),
                    framework=self.framework,  # type: ignore[arg-type]
                )

        for path, content in sources.items():
            parent = nodes.get(self.component_name(path, content) or "")
            if parent is None:
                continue
            for used in self.component_usages(path, content):
                child = nodes.get(used)
                if child is None or child is parent:
                    continue
                if child not in parent.children:
                    parent.children.append(child)
                if child.parent is None:
                    child.parent = parent

        roots = [node for node in nodes.values() if node.parent is None]
        for root in roots:
            assign_depths(root)
        return roots


def assign_depths(root: ComponentHierarchy) -> None:
    """Set ``depth`` breadth-first from *root*; each node is visited once."""
    root.depth = 0
    seen = {id(root)}
    queue = [root]
    while queue:
        node = queue.pop(0)
        for child in node.children:
            if id(child) in seen:
                continue
            seen.add(id(child))
            child.depth = node.depth + 1
            queue.append(child)
