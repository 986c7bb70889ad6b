"""Extraction — parse markdown documentation into sections and code blocks."""

from skillref_engine.extract.document import (
    CodeBlock,
    Document,
    FrontmatterError,
    Section,
    extract_doc,
    get_title,
    read_doc,
)
from skillref_engine.extract.cleaning import clean_twoslash, strip_html, strip_links
from skillref_engine.extract.sections import extract_code_blocks, split_into_sections

__all__ = [
    "CodeBlock",
    "Document",
    "FrontmatterError",
    "Section",
    "extract_doc",
    "get_title",
    "read_doc",
    "clean_twoslash",
    "strip_html",
    "strip_links",
    "extract_code_blocks",
    "split_into_sections",
]
