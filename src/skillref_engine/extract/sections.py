"""Split markdown into heading-resolved sections and fenced code blocks.

Both splitters are explicit two-state line scanners ("prose" vs. "in
fenced code"), so a ``#`` line inside a code fence is never mistaken for
a heading.

Known limitations:
- Nested fences are not recognised. Any ``` line inside an open block
  closes it, so an inner opener ends the outer block early.
- An unterminated fence hides every heading after it, and its block is
  dropped with a warning instead of being emitted half-open.
"""

from __future__ import annotations

import re
from typing import Iterable

from skillref_engine.extract.models import CodeBlock, Section
from skillref_engine.logging import get_logger

logger = get_logger("extract")

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
FENCE_PREFIX = "```"
ANNOTATION_MARKER = "twoslash"
MAX_LEVEL = 6

# Index 0 is unused; slots 1..6 hold the most recent heading at that level.
HeadingTable = tuple[str, ...]
EMPTY_TABLE: HeadingTable = ("",) * (MAX_LEVEL + 1)


def is_fence(line: str) -> bool:
    return line.lstrip().startswith(FENCE_PREFIX)


def parse_fence_info(line: str) -> tuple[str, bool]:
    """Return (language, annotated) from an opening fence line."""
    info = line.lstrip()[len(FENCE_PREFIX):].strip()
    match = re.match(r"(\w*)", info)
    language = match.group(1) if match else ""
    rest = info[len(language):].split()
    return language or "text", ANNOTATION_MARKER in rest


def record_heading(table: HeadingTable, level: int, text: str) -> HeadingTable:
    """Return a new table with ``text`` at ``level`` and every deeper slot cleared."""
    return table[:level] + (text,) + ("",) * (MAX_LEVEL - level)


def parent_of(table: HeadingTable, level: int) -> str:
    """Nearest non-empty heading at a strictly shallower level."""
    for i in range(level - 1, 0, -1):
        if table[i]:
            return table[i]
    return ""


def split_into_sections(lines: Iterable[str]) -> list[Section]:
    """Fold a line sequence into sections with resolved parent headings.

    A document with no headings yields a single level-0 section. A
    leading prologue that is entirely blank is dropped when the
    document does have headings.
    """
    sections: list[Section] = []
    table = EMPTY_TABLE
    heading, level, parent = "", 0, ""
    current: list[str] = []
    in_code = False
    saw_heading = False

    def flush() -> None:
        if heading or any(line.strip() for line in current):
            sections.append(_build_section(heading, level, parent, current))

    for line in lines:
        if is_fence(line):
            in_code = not in_code
            current.append(line)
            continue
        match = None if in_code else HEADING_RE.match(line)
        if match is None:
            current.append(line)
            continue

        flush()
        saw_heading = True
        level = len(match.group(1))
        heading = match.group(2).strip()
        table = record_heading(table, level, heading)
        parent = parent_of(table, level)
        current = []

    if saw_heading:
        flush()
    else:
        sections.append(_build_section("", 0, "", current))
    return sections


def _build_section(heading: str, level: int, parent: str, lines: list[str]) -> Section:
    body = "\n".join(lines)
    return Section(
        heading=heading,
        level=level,
        parent_heading=parent,
        body=body,
        code_blocks=tuple(extract_code_blocks(body)),
    )


def extract_code_blocks(content: str) -> list[CodeBlock]:
    """Extract fenced code blocks from markdown content, in order."""
    blocks: list[CodeBlock] = []
    in_code = False
    language, annotated = "text", False
    code: list[str] = []

    for line in content.split("\n"):
        if not is_fence(line):
            if in_code:
                code.append(line)
            continue
        if in_code:
            blocks.append(CodeBlock(language, "\n".join(code), annotated))
            in_code = False
        else:
            language, annotated = parse_fence_info(line)
            code = []
            in_code = True

    if in_code:
        logger.warning("Unterminated %s code fence dropped (%d lines)", language, len(code))
    return blocks


def prose_lines(content: str) -> list[str]:
    """Lines of ``content`` outside fenced code, fence lines excluded."""
    lines: list[str] = []
    in_code = False
    for line in content.split("\n"):
        if is_fence(line):
            in_code = not in_code
            continue
        if not in_code:
            lines.append(line)
    return lines
