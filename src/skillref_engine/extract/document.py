"""Parse markdown documentation files into Documents.

A file may start with a YAML metadata block delimited by ``---`` lines.
The block is parsed with PyYAML; the rest of the file is split into
sections by :func:`split_into_sections`.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from skillref_engine.extract.models import CodeBlock, Document, Section
from skillref_engine.extract.sections import split_into_sections

FRONTMATTER_DELIM = "---"


class FrontmatterError(ValueError):
    """Raised when a document's metadata block is not a YAML mapping."""


def split_frontmatter(text: str) -> tuple[dict, str]:
    """Split a leading YAML metadata block from the markdown body.

    Returns:
        (frontmatter dict, body). Text without a complete block is
        returned unchanged with an empty dict.

    Raises:
        FrontmatterError: If the block is malformed YAML or not a mapping.
    """
    lines = text.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_DELIM:
        return {}, text

    for i in range(1, len(lines)):
        if lines[i].strip() != FRONTMATTER_DELIM:
            continue
        raw = "\n".join(lines[1:i])
        try:
            data = yaml.safe_load(raw) if raw.strip() else {}
        except yaml.YAMLError as e:
            raise FrontmatterError(f"Malformed frontmatter: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise FrontmatterError("Frontmatter is not a YAML mapping")
        return data, "\n".join(lines[i + 1:])

    return {}, text


def extract_doc(path: str, raw_markdown: str) -> Document:
    """Parse markdown text into a Document.

    Args:
        path: Path recorded on the document (relative to the docs root).
        raw_markdown: File contents, frontmatter included.
    """
    normalized = raw_markdown.replace("\r\n", "\n")
    frontmatter, body = split_frontmatter(normalized)
    return Document(
        path=path,
        frontmatter=frontmatter,
        sections=tuple(split_into_sections(body.split("\n"))),
        raw_body=body,
    )


def read_doc(docs_root: Path | str, rel_path: str) -> Document:
    """Read and parse ``rel_path`` under ``docs_root``.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not UTF-8.
        FrontmatterError: If the metadata block is malformed.
    """
    full_path = Path(docs_root) / rel_path
    return extract_doc(rel_path, full_path.read_text(encoding="utf-8"))


def get_title(doc: Document) -> str:
    """Title from frontmatter ``title``, then ``display``, then the filename stem."""
    fm = doc.frontmatter
    for key in ("title", "display"):
        value = fm.get(key)
        if value:
            return str(value)
    name = doc.path.rsplit("/", 1)[-1]
    return name[:-3] if name.endswith(".md") else name


__all__ = [
    "CodeBlock",
    "Document",
    "FrontmatterError",
    "Section",
    "extract_doc",
    "get_title",
    "read_doc",
    "split_frontmatter",
]
