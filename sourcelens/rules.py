"""Table-driven line scoring shared by every locator.

A line is a candidate only when it opens a tag with the descriptor's tag
name; each rule in :data:`MATCH_RULES` then adds ``weight * hits`` to the
confidence, which is clamped to 1.0.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .models import ElementDescriptor

TEXT_PREFIX_LENGTH = 20
MIN_TEXT_LENGTH = 4


@dataclass(frozen=True)
class FrameworkSyntax:
    framework: str
    file_patterns: Tuple[str, ...]
    class_attributes: Tuple[str, ...]
    comment_prefixes: Tuple[str, ...]

    def is_comment(self, line: str) -> bool:
        return line.strip().startswith(self.comment_prefixes)


SYNTAX: Dict[str, FrameworkSyntax] = {
    "react": FrameworkSyntax(
        framework="react",
        file_patterns=("**/*.jsx", "**/*.tsx"),
        class_attributes=("className", "class"),
        comment_prefixes=("//", "/*"),
    ),
    "vue": FrameworkSyntax(
        framework="vue",
        file_patterns=("**/*.vue",),
        class_attributes=("class", ":class", "v-bind:class"),
        comment_prefixes=("<!--", "//", "/*"),
    ),
    "angular": FrameworkSyntax(
        framework="angular",
        file_patterns=("**/*.component.html", "**/*.component.ts"),
        class_attributes=("class", "[class]", "[ngClass]"),
        comment_prefixes=("<!--", "//", "/*"),
    ),
    "html": FrameworkSyntax(
        framework="html",
        file_patterns=("**/*.html",),
        class_attributes=("class",),
        comment_prefixes=("<!--",),
    ),
}


@dataclass
class LineMatch:
    column: int
    confidence: float
    matched_rules: List[str] = field(default_factory=list)


def tag_pattern(tag_name: str) -> re.Pattern:
    return re.compile(rf"<{re.escape(tag_name)}(?![\w.-])", re.IGNORECASE)


def attribute_values(line: str, attribute: str) -> List[str]:
    """Return the quoted values of ``attribute=`` occurrences in *line*."""
    pattern = re.compile(
        rf"(?<![\w:\[.-]){re.escape(attribute)}\s*=\s*\{{?\s*([\"'`])(.*?)\1"
    )
    return [m.group(2) for m in pattern.finditer(line)]


def class_tokens(line: str, syntax: FrameworkSyntax) -> List[str]:
    tokens: List[str] = []
    for attribute in syntax.class_attributes:
        for value in attribute_values(line, attribute):
            tokens.extend(value.split())
    return tokens


# ---------------------------------------------------------------------------
# Rules: each returns the number of hits on the line
# ---------------------------------------------------------------------------

def _id_hits(descriptor: ElementDescriptor, line: str, syntax: FrameworkSyntax) -> int:
    if not descriptor.id:
        return 0
    pattern = re.compile(
        rf"(?<![\w:.-])id\s*=\s*\{{?\s*([\"'`]){re.escape(descriptor.id)}\1",
        re.IGNORECASE,
    )
    return 1 if pattern.search(line) else 0


def _class_hits(descriptor: ElementDescriptor, line: str, syntax: FrameworkSyntax) -> int:
    wanted = {c.lower() for c in descriptor.class_tokens}
    if not wanted:
        return 0
    present = {c.lower() for c in class_tokens(line, syntax)}
    return len(wanted & present)


def _text_hits(descriptor: ElementDescriptor, line: str, syntax: FrameworkSyntax) -> int:
    text = (descriptor.text_content or "").strip()
    if len(text) < MIN_TEXT_LENGTH:
        return 0
    prefix = re.escape(text[:TEXT_PREFIX_LENGTH])
    return 1 if re.search(prefix, line, re.IGNORECASE) else 0


RuleFn = Callable[[ElementDescriptor, str, FrameworkSyntax], int]

TAG_WEIGHT = 0.3

# (name, weight per hit, hit counter)
MATCH_RULES: Tuple[Tuple[str, float, RuleFn], ...] = (
    ("id", 0.4, _id_hits),
    ("class", 0.2, _class_hits),
    ("text", 0.2, _text_hits),
)


def score_line(
    descriptor: ElementDescriptor,
    line: str,
    syntax: FrameworkSyntax,
) -> Optional[LineMatch]:
    """Score one source line against a descriptor.

    Returns None when the line does not open a tag with the descriptor's
    tag name.
    """
    if not descriptor.tag_name:
        return None
    tag_match = tag_pattern(descriptor.tag_name).search(line)
    if not tag_match:
        return None

    confidence = TAG_WEIGHT
    matched = ["tag"]
    for name, weight, rule in MATCH_RULES:
        hits = rule(descriptor, line, syntax)
        if hits:
            confidence += weight * hits
            matched.append(name)

    return LineMatch(
        column=tag_match.start() + 1,
        confidence=round(min(confidence, 1.0), 4),
        matched_rules=matched,
    )


def classify_element(tag_name: str) -> str:
    """Map a tag name onto ``component``, ``element`` or ``fragment``.

    DOM ``tagName`` values are upper-case (``BUTTON``), so an all-caps name
    is an element, not a component.
    """
    if tag_name in ("", "Fragment", "React.Fragment"):
        return "fragment"
    if tag_name[0].isupper() and not tag_name.isupper():
        return "component"
    return "element"
