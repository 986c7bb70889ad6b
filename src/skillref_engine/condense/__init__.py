"""Condensation — reduce parsed documents to bounded reference text."""

from skillref_engine.condense.condenser import condense_doc, condense_section
from skillref_engine.condense.rules import extract_code_examples, extract_rules, format_ref_file

__all__ = [
    "condense_doc",
    "condense_section",
    "extract_code_examples",
    "extract_rules",
    "format_ref_file",
]
