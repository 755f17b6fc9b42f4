"""Data models shared by resolution, backup and mutation layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generic, Iterator, List, Literal, Optional, TypeVar

from .errors import SourceLensError

Framework = Literal["react", "vue", "angular", "html"]
ElementType = Literal["component", "element", "fragment"]
BuildTool = Literal["vite", "webpack", "next", "nuxt", "angular-cli", "custom"]
ChangeType = Literal["inline-style", "css-class"]
ConflictType = Literal["file-changed", "merge-conflict", "syntax-error"]

FRAMEWORKS = ("react", "vue", "angular", "html")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Resolution input / output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParentInfo:
    tag_name: str
    class_name: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ElementDescriptor:
    """Tag/id/class/text fingerprint of a rendered element."""
    tag_name: str
    id: Optional[str] = None
    class_name: Optional[str] = None
    text_content: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    parent_info: Optional[ParentInfo] = None

    @property
    def class_tokens(self) -> List[str]:
        return [c for c in (self.class_name or "").split() if c]

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ElementDescriptor":
        """Build from a capture payload (camelCase or snake_case keys)."""
        parent = payload.get("parentInfo") or payload.get("parent_info")
        return cls(
            tag_name=payload.get("tagName") or payload.get("tag_name") or "",
            id=payload.get("id"),
            class_name=payload.get("className") or payload.get("class_name"),
            text_content=payload.get("textContent") or payload.get("text_content"),
            attributes=dict(payload.get("attributes") or {}),
            parent_info=ParentInfo(
                tag_name=parent.get("tagName") or parent.get("tag_name") or "",
                class_name=parent.get("className") or parent.get("class_name"),
                id=parent.get("id"),
            ) if parent else None,
        )


@dataclass
class FrameworkDetectionResult:
    framework: Framework
    confidence: float
    evidence: List[str] = field(default_factory=list)
    version: Optional[str] = None
    build_tool: Optional[BuildTool] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ElementSourceInfo:
    """Where an element was found in source."""
    file_path: str
    line_number: int
    column_number: int
    component_name: str
    framework: Framework
    element_type: ElementType
    confidence: float
    additional_info: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_location(self) -> "SourceLocation":
        return SourceLocation(
            file_path=self.file_path,
            line_number=self.line_number,
            column_number=self.column_number,
            component_name=self.component_name,
        )

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line_number}:{self.column_number}"


@dataclass(eq=False)
class ComponentHierarchy:
    """Node of the component graph.

    ``parent`` is a back-pointer only; it is excluded from repr so that
    printing a node never recurses up the tree.
    """
    component_name: str
    file_path: str
    framework: Framework
    children: List["ComponentHierarchy"] = field(default_factory=list)
    parent: Optional["ComponentHierarchy"] = field(default=None, repr=False)
    depth: int = 0

    def walk(self) -> Iterator["ComponentHierarchy"]:
        """Breadth-first traversal, visiting each node once."""
        seen = {id(self)}
        queue = [self]
        while queue:
            node = queue.pop(0)
            yield node
            for child in node.children:
                if id(child) not in seen:
                    seen.add(id(child))
                    queue.append(child)

    def find(self, component_name: str) -> Optional["ComponentHierarchy"]:
        for node in self.walk():
            if node.component_name == component_name:
                return node
        return None

    def to_dict(self, _seen: Optional[set] = None) -> Dict[str, Any]:
        seen = _seen if _seen is not None else set()
        seen.add(id(self))
        return {
            "component_name": self.component_name,
            "file_path": self.file_path,
            "framework": self.framework,
            "depth": self.depth,
            "parent": self.parent.component_name if self.parent else None,
            "children": [
                child.to_dict(seen) for child in self.children if id(child) not in seen
            ],
        }


@dataclass
class SourceSearchOptions:
    root_path: str
    exclude_patterns: List[str] = field(
        default_factory=lambda: ["node_modules", ".git", "dist", "build"]
    )
    include_patterns: List[str] = field(default_factory=list)
    max_depth: int = 10
    frameworks: List[Framework] = field(default_factory=list)


@dataclass
class MatchLocation:
    line: int
    column: int
    end_line: int
    end_column: int


@dataclass
class MatchContext:
    before_lines: List[str] = field(default_factory=list)
    matched_lines: List[str] = field(default_factory=list)
    after_lines: List[str] = field(default_factory=list)


@dataclass
class ComponentMatch:
    file_path: str
    component_name: str
    framework: Framework
    confidence: float
    match_type: Literal["exact", "partial", "fuzzy"]
    location: MatchLocation
    context: MatchContext = field(default_factory=MatchContext)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CacheEntry(Generic[T]):
    data: T
    timestamp: float
    ttl: float


# ---------------------------------------------------------------------------
# Backups
# ---------------------------------------------------------------------------

@dataclass
class BackupInfo:
    original_path: str
    backup_path: str
    timestamp: int
    hash: str
    reason: str
    written_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BackupInfo":
        return cls(
            original_path=payload["original_path"],
            backup_path=payload["backup_path"],
            timestamp=int(payload["timestamp"]),
            hash=payload["hash"],
            reason=payload.get("reason", ""),
            written_hash=payload.get("written_hash"),
        )


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

@dataclass
class SourceLocation:
    file_path: str
    line_number: int
    column_number: int = 1
    component_name: str = "Unknown"


@dataclass
class ElementStyleChanges:
    """Requested style edit for one element."""
    element_selector: str
    styles: Dict[str, str]
    element_id: Optional[str] = None
    class_name: Optional[str] = None
    tag_name: Optional[str] = None
    source_info: Optional[SourceLocation] = None

    def to_descriptor(self) -> ElementDescriptor:
        return ElementDescriptor(
            tag_name=self.tag_name or "div",
            id=self.element_id,
            class_name=self.class_name,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ElementStyleChanges":
        source = payload.get("sourceInfo") or payload.get("source_info")
        return cls(
            element_selector=payload.get("elementSelector") or payload.get("element_selector") or "",
            styles=dict(payload.get("styles") or {}),
            element_id=payload.get("elementId") or payload.get("element_id"),
            class_name=payload.get("className") or payload.get("class_name"),
            tag_name=payload.get("tagName") or payload.get("tag_name"),
            source_info=SourceLocation(
                file_path=source.get("filePath") or source["file_path"],
                line_number=int(source.get("lineNumber", source.get("line_number", 0))),
                column_number=int(source.get("columnNumber") or source.get("column_number") or 1),
                component_name=source.get("componentName") or source.get("component_name") or "Unknown",
            ) if source else None,
        )


@dataclass
class FileModification:
    file_path: str
    original_content: str
    modified_content: str
    change_type: ChangeType
    timestamp: int
    backup_path: Optional[str] = None


@dataclass
class RollbackInfo:
    modifications: List[FileModification] = field(default_factory=list)
    can_rollback: bool = True


@dataclass
class Conflict:
    type: ConflictType
    file_path: str
    description: str
    suggestions: List[str] = field(default_factory=list)


@dataclass
class ConflictDetection:
    has_conflicts: bool
    conflicts: List[Conflict] = field(default_factory=list)


@dataclass
class ModificationResult:
    success: bool
    modified_files: List[str] = field(default_factory=list)
    backup_files: List[str] = field(default_factory=list)
    applied_styles: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    error_code: Optional[str] = None
    rollback_info: Optional[RollbackInfo] = None
    conflicts: Optional[ConflictDetection] = None

    @classmethod
    def failure(cls, error: Any) -> "ModificationResult":
        if isinstance(error, SourceLensError):
            return cls(success=False, error=error.message, error_code=error.code)
        return cls(success=False, error=str(error), error_code="unknown-error")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        if self.success:
            return f"Applied {len(self.applied_styles)} style(s) to {len(self.modified_files)} file(s)"
        return f"Failed: {self.error}"


@dataclass
class ChangeEvent:
    type: Literal["file-changed", "styles-updated"]
    file_path: str
    changes: Dict[str, str]
    timestamp: int
