"""Style rewriting for JSX/TSX source lines."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..errors import ElementNotFound
from ..models import ElementStyleChanges
from .base import StyleMutator, target_line_index

logger = logging.getLogger(__name__)

MAX_INLINE_PROPERTIES = 3
MAX_TAG_LINES = 20
STYLING_MARKERS = ("styled-components", "@emotion", ".module.css", ".module.scss")

IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
STYLE_ATTR = re.compile(r"(?<![\w-])style\s*=\s*\{\{(.*?)\}\}")
STYLE_NAME = re.compile(r"(?<![\w-])style\s*=")
STYLE_ENTRY = re.compile(
    r"""(?P<key>[A-Za-z_$][\w$]*|'[^']*'|"[^"]*")\s*:\s*"""
    r"""(?P<value>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`[^`]*`|[^,]+?)\s*(?:,|$)"""
)
CLASS_LITERAL = re.compile(
    r"""(?<![\w-])(?:className|class)\s*=\s*(?:\{\s*)?(?P<q>["'`])(?P<value>.*?)(?P=q)"""
)
CLASS_EXPRESSION = re.compile(r"(?<![\w-])className\s*=\s*\{")

# Lazy attribute filler that may step over arrow functions.
_ATTRS = r"(?:=>|[^>])*?"


def to_camel_case(prop: str) -> str:
    """``font-size`` -> ``fontSize``; custom properties are left alone."""
    if prop.startswith("--"):
        return prop
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), prop)


def _format_key(key: str) -> str:
    return key if IDENTIFIER.match(key) else f"'{key}'"


def _format_value(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def parse_style_object(body: str) -> Dict[str, str]:
    """Parse ``color: 'red', fontSize: 12`` into key -> raw value text."""
    entries: Dict[str, str] = {}
    for match in STYLE_ENTRY.finditer(body):
        key = match.group("key")
        if key[0] in "'\"":
            key = key[1:-1]
        entries[key] = match.group("value").strip()
    return entries


def render_style_object(entries: Dict[str, str]) -> str:
    body = ", ".join(f"{_format_key(key)}: {value}" for key, value in entries.items())
    return "{{ " + body + " }}"


def element_pattern(changes: ElementStyleChanges) -> re.Pattern:
    """Opening-tag regex for the tag, id and classes of *changes*.

    Id and class constraints are lookaheads, so attribute order is free.
    """
    tag = changes.tag_name or "div"
    pattern = rf"<{re.escape(tag)}(?![\w.-])"
    if changes.element_id:
        pattern += (
            rf"(?={_ATTRS}(?<![\w:.-])id\s*=\s*\{{?\s*[\"'`]"
            rf"{re.escape(changes.element_id)}[\"'`])"
        )
    classes = [c for c in (changes.class_name or "").split() if c]
    if classes:
        alternation = "|".join(re.escape(c) for c in classes)
        pattern += (
            rf"(?={_ATTRS}(?<![\w-])(?:className|class)\s*=\s*\{{?\s*[\"'`]"
            rf"[^\"'`]*?(?<![\w-])(?:{alternation})(?![\w-]))"
        )
    return re.compile(pattern, re.IGNORECASE)


def _closing(line: str, start: int, closer: str) -> Optional[int]:
    """Index of the *closer* that ends the construct starting at *start*.

    Quoted strings are skipped and braces are balanced.
    """
    quote = None
    depth = 0
    i = start
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if closer == "}" and depth == 0:
                return i
        elif ch == closer and depth == 0:
            return i
        i += 1
    return None


def opening_tag_end(line: str, start: int) -> Optional[int]:
    """Index of the ``>`` closing the tag opened at *start*, if on this line."""
    return _closing(line, start + 1, ">")


def opening_tag_spans(lines: List[str], index: int, start: int) -> List[Tuple[int, int, int]]:
    """``(row, begin, end)`` spans covering the opening tag at ``lines[index][start]``.

    A tag written over several lines is followed until its ``>``.
    """
    end = opening_tag_end(lines[index], start)
    if end is not None:
        return [(index, start, end)]
    spans = [(index, start, len(lines[index]))]
    for row in range(index + 1, min(len(lines), index + MAX_TAG_LINES)):
        close = _closing(lines[row], 0, ">")
        spans.append((row, 0, len(lines[row]) if close is None else close))
        if close is not None:
            break
    return spans


def insert_attribute(line: str, start: int, tag: str, attribute: str) -> str:
    """Add *attribute* before the tag's ``>``/``/>``.

    A tag that continues onto the next line gets the attribute right after
    its name.
    """
    end = opening_tag_end(line, start)
    if end is None:
        at = start + 1 + len(tag)
        return f"{line[:at]} {attribute}{line[at:]}"
    if line[:end].endswith("/"):
        head = line[: end - 1].rstrip()
        return f"{head} {attribute} />{line[end + 1:]}"
    head = line[:end].rstrip()
    return f"{head} {attribute}{line[end:]}"


class ReactStyleMutator(StyleMutator):
    framework = "react"

    def determine_strategy(self, content: str, changes: ElementStyleChanges) -> str:
        has_markers = any(marker in content for marker in STYLING_MARKERS)
        if len(changes.styles) <= MAX_INLINE_PROPERTIES and not has_markers:
            return "inline-style"
        return "css-class"

    def _locate(self, content: str, changes: ElementStyleChanges):
        lines = content.split("\n")
        line_number = changes.source_info.line_number
        index = target_line_index(lines, line_number)
        match = element_pattern(changes).search(lines[index])
        if match is None:
            raise ElementNotFound(
                f"Could not find <{changes.tag_name or 'div'}> element on line {line_number}"
            )
        return lines, index, match.start()

    def apply_inline_styles(self, content: str, changes: ElementStyleChanges) -> str:
        lines, index, start = self._locate(content, changes)
        new_entries = {
            to_camel_case(prop): _format_value(value) for prop, value in changes.styles.items()
        }

        for row, begin, stop in opening_tag_spans(lines, index, start):
            line = lines[row]
            existing = STYLE_ATTR.search(line, begin, stop)
            if existing:
                merged = parse_style_object(existing.group(1))
                merged.update(new_entries)
                replacement = "style=" + render_style_object(merged)
                lines[row] = line[: existing.start()] + replacement + line[existing.end():]
                break
            if STYLE_NAME.search(line, begin, stop):
                raise ElementNotFound(f"Could not rewrite the style attribute on line {row + 1}")
        else:
            tag = changes.tag_name or "div"
            lines[index] = insert_attribute(
                lines[index], start, tag, "style=" + render_style_object(new_entries)
            )

        logger.debug("Inlined %d style(s) on line %d", len(new_entries), index + 1)
        return "\n".join(lines)

    def apply_class_styles(self, content: str, changes: ElementStyleChanges, class_name: str) -> str:
        lines, index, start = self._locate(content, changes)

        for row, begin, stop in opening_tag_spans(lines, index, start):
            line = lines[row]
            literal = CLASS_LITERAL.search(line, begin, stop)
            if literal:
                value = literal.group("value")
                if class_name not in value.split():
                    updated = f"{value} {class_name}" if value.strip() else class_name
                    lines[row] = line[: literal.start("value")] + updated + line[literal.end("value"):]
                break
            expression = CLASS_EXPRESSION.search(line, begin, stop)
            if expression:
                brace = expression.end() - 1
                close = _closing(line, brace, "}")
                if close is None:
                    raise ElementNotFound(f"Could not rewrite className expression on line {row + 1}")
                expr = line[brace + 1:close].strip()
                if class_name not in expr:
                    replacement = "className={`${" + expr + "} " + class_name + "`}"
                    lines[row] = line[: expression.start()] + replacement + line[close + 1:]
                break
        else:
            tag = changes.tag_name or "div"
            lines[index] = insert_attribute(lines[index], start, tag, f'className="{class_name}"')

        return "\n".join(lines)
