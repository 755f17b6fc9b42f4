"""Per-framework style mutators."""

from __future__ import annotations

from typing import Dict, Optional, Type

from ..backup import BackupManager
from .base import StyleMutator, generate_class_name
from .react import ReactStyleMutator

MUTATORS: Dict[str, Type[StyleMutator]] = {
    "react": ReactStyleMutator,
}


def create_mutator(
    framework: str, backup_manager: BackupManager, class_stylesheet: Optional[str] = None
) -> Optional[StyleMutator]:
    """Mutator for *framework*, or None when it has no mutation support."""
    cls = MUTATORS.get(framework)
    if cls is None:
        return None
    return cls(backup_manager, class_stylesheet)


__all__ = [
    "MUTATORS",
    "ReactStyleMutator",
    "StyleMutator",
    "create_mutator",
    "generate_class_name",
]
