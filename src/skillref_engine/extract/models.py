"""Parsed documentation model: documents, sections, and code blocks.

All three are frozen. They are built fresh for every build and never
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block.

    ``text`` excludes the fence lines. ``line_count`` is the number of
    newline-delimited lines in ``text`` and is never below 1.
    """

    language: str
    text: str
    annotated: bool = False

    @property
    def line_count(self) -> int:
        return len(self.text.split("\n"))


@dataclass(frozen=True)
class Section:
    """Content between one heading and the next.

    Sections before the first heading have level 0 and empty
    ``heading``/``parent_heading``.
    """

    heading: str
    level: int
    parent_heading: str
    body: str
    code_blocks: tuple[CodeBlock, ...] = ()

    @property
    def body_line_count(self) -> int:
        return len(self.body.split("\n"))


@dataclass(frozen=True)
class Document:
    """A parsed markdown source file."""

    path: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    sections: tuple[Section, ...] = ()
    raw_body: str = ""

    @property
    def body_line_count(self) -> int:
        return len(self.raw_body.split("\n"))
