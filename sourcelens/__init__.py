"""Locate the source of rendered UI elements and rewrite their styles."""

from .models import (
    ComponentHierarchy,
    ComponentMatch,
    ElementDescriptor,
    ElementSourceInfo,
    ElementStyleChanges,
    FrameworkDetectionResult,
    ModificationResult,
    SourceLocation,
)
from .workspace import Workspace, open_workspace

__version__ = "0.4.0"

__all__ = [
    "ComponentHierarchy",
    "ComponentMatch",
    "ElementDescriptor",
    "ElementSourceInfo",
    "ElementStyleChanges",
    "FrameworkDetectionResult",
    "ModificationResult",
    "SourceLocation",
    "Workspace",
    "open_workspace",
    "__version__",
]
