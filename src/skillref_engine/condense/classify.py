"""Heuristic classifiers used by the condensers.

Each classifier is a small pure function parameterized by its marker
vocabulary, so vocabularies can be swapped in tests or configuration
without touching extraction or assembly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from skillref_engine.extract.cleaning import strip_links
from skillref_engine.extract.models import CodeBlock, Section

NEGATIVE = "negative"
POSITIVE = "positive"
NEUTRAL = "neutral"

WRONG = "wrong"
RIGHT = "right"

# Section titles that say nothing on their own; the parent heading is used instead.
GENERIC_HEADINGS = frozenset({
    "example", "examples", "try", "try it", "usage", "syntax",
    "description", "details", "see also", "note", "notes",
})

TARGET_LANGUAGES = ("ts", "typescript", "tsx")


@dataclass(frozen=True)
class RuleVocabulary:
    """Markers that give a prose line a polarity."""

    negative_glyphs: tuple[str, ...] = ("❌",)
    positive_glyphs: tuple[str, ...] = ("✅",)
    # Matched anywhere in the line.
    negative_markers: tuple[str, ...] = ("**Don't**", "_Don't_")
    # Matched at the start of the line, followed by whitespace.
    positive_markers: tuple[str, ...] = ("**Do**",)
    negative_verbs: tuple[str, ...] = ("Never", "Avoid", "Do not", "Don't")
    positive_verbs: tuple[str, ...] = ("Always", "Prefer", r"Use\s+\S+\s+instead")

    def verb_pattern(self, verbs: Sequence[str]) -> re.Pattern:
        return re.compile(r"^[-*]\s+(?:" + "|".join(verbs) + r")\b", re.IGNORECASE)


@dataclass(frozen=True)
class SizeWindow:
    """Inclusive line-count range preferred when picking a code block."""

    low: int
    high: int

    def __contains__(self, lines: int) -> bool:
        return self.low <= lines <= self.high


DEFAULT_VOCABULARY = RuleVocabulary()
SWEET_SPOT = SizeWindow(2, 15)

_WRONG_CODE_RES = [
    re.compile(r"/\*\s*WRONG\s*\*/", re.IGNORECASE),
    re.compile(r"DON'T DO THIS", re.IGNORECASE),
]
_RIGHT_CODE_RES = [
    re.compile(r"/\*\s*OK\s*\*/", re.IGNORECASE),
    re.compile(r"/\*\s*RIGHT\s*\*/", re.IGNORECASE),
]
_LEAD_IN_CHARS = 200
_PROBE_CHARS = 40


def normalize_heading(heading: str) -> str:
    return re.sub(r"[`#*_]", "", strip_links(heading)).strip().lower()


def is_generic_heading(heading: str, generic: Iterable[str] = GENERIC_HEADINGS) -> bool:
    """True if the heading is a generic label such as "Example" or "Notes"."""
    return normalize_heading(heading) in set(generic)


def resolve_heading(
    section: Section,
    fallback: str,
    generic: Iterable[str] = GENERIC_HEADINGS,
) -> str:
    """Section heading, or its parent heading when the section's own is generic.

    ``fallback`` stands in for sections with no heading at all.
    """
    heading = strip_links(section.heading or fallback)
    if is_generic_heading(heading, generic):
        parent = strip_links(section.parent_heading)
        if parent:
            return parent
    return heading


def classify_rule(line: str, vocabulary: RuleVocabulary = DEFAULT_VOCABULARY) -> str:
    """Classify a prose line as negative, positive, or neutral.

    Glyphs and bold/italic do/don't markers win over the imperative
    verbs of a bullet line.
    """
    text = line.strip()
    if not text:
        return NEUTRAL

    if text.startswith(vocabulary.negative_glyphs) or any(
        marker in text for marker in vocabulary.negative_markers
    ):
        return NEGATIVE
    if text.startswith(vocabulary.positive_glyphs) or any(
        text.startswith(marker) and text[len(marker):len(marker) + 1].isspace()
        for marker in vocabulary.positive_markers
    ):
        return POSITIVE

    if vocabulary.verb_pattern(vocabulary.negative_verbs).match(text):
        return NEGATIVE
    if vocabulary.verb_pattern(vocabulary.positive_verbs).match(text):
        return POSITIVE
    return NEUTRAL


def clean_rule_text(text: str, vocabulary: RuleVocabulary = DEFAULT_VOCABULARY) -> str:
    """Strip list markers, glyphs, and do/don't markers from a rule line."""
    text = re.sub(r"^[-*]\s+", "", text.strip())
    glyphs = vocabulary.negative_glyphs + vocabulary.positive_glyphs
    if glyphs:
        text = re.sub("^(?:" + "|".join(map(re.escape, glyphs)) + r")\s*", "", text)
    text = re.sub(r"^\*\*(?:Don't|Do)\*\*\s*", "", text)
    text = re.sub(r"^_(?:Don't|Do)_\s*", "", text)
    return text.strip()


def detect_annotation(
    block: CodeBlock,
    section_body: str,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> str | None:
    """Tag a code block as a wrong or right illustration, if it is one.

    Markers inside the code win; otherwise the prose just before the
    block is searched for do/don't glyphs and markers.
    """
    if any(p.search(block.text) for p in _WRONG_CODE_RES):
        return WRONG
    if any(p.search(block.text) for p in _RIGHT_CODE_RES):
        return RIGHT

    pos = section_body.find(block.text[:_PROBE_CHARS])
    if pos < 0:
        return None
    before = section_body[max(0, pos - _LEAD_IN_CHARS):pos]
    if any(g in before for g in vocabulary.negative_glyphs) or "**Don't**" in before:
        return WRONG
    if any(g in before for g in vocabulary.positive_glyphs) or re.search(r"\*\*Do\*\*\s", before):
        return RIGHT
    return None


def is_target_block(block: CodeBlock, languages: Sequence[str] | None = TARGET_LANGUAGES) -> bool:
    """True if the block's language is a target language (any when ``languages`` is None)."""
    return languages is None or block.language in languages


def select_best_block(
    blocks: Sequence[CodeBlock],
    window: SizeWindow = SWEET_SPOT,
) -> CodeBlock | None:
    """Shortest block inside the sweet-spot window, else the shortest of any size.

    Ties go to the earliest block.
    """
    if not blocks:
        return None
    ranked = sorted(range(len(blocks)), key=lambda i: (blocks[i].line_count, i))
    for i in ranked:
        if blocks[i].line_count in window:
            return blocks[i]
    return blocks[ranked[0]]
