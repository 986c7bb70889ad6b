"""Budget-constrained condensation of parsed documents.

Content is ranked structural rules > code examples > prose. A document
budget reserves two lines for its title and spreads the rest across
sections in proportion to their raw size; each section then splits its
share 60/40 between prose and code.

Output is a pure function of (document, budget, priorities): no clocks,
no unordered iteration.
"""

from __future__ import annotations

import re
from typing import Sequence

from skillref_engine.condense.classify import (
    DEFAULT_VOCABULARY,
    NEGATIVE,
    NEUTRAL,
    SWEET_SPOT,
    TARGET_LANGUAGES,
    RuleVocabulary,
    SizeWindow,
    classify_rule,
    clean_rule_text,
    is_target_block,
    resolve_heading,
    select_best_block,
)
from skillref_engine.extract.cleaning import clean_twoslash, strip_html, strip_links
from skillref_engine.extract.document import get_title
from skillref_engine.extract.models import CodeBlock, Document, Section
from skillref_engine.extract.sections import prose_lines

TITLE_LINES = 2
MIN_SECTION_LINES = 3
PROSE_SHARE = 0.6
MIN_CODE_BUDGET = 2
FENCE_LINES = 2
SENTENCE_FALLBACK_CHARS = 120

# Priority tags that promote do/don't lines ahead of paragraph digests.
RULE_PRIORITIES = frozenset({"type-rules", "gotchas", "constraints", "checklists"})

_SENTENCE_RE = re.compile(r"^(.*?[.!?])(?=\s|$)")
_LIST_MARKER_RE = re.compile(r"^(?:[-*+]|\d+\.)\s+")


def allocate_budgets(weights: Sequence[int], total: int, floor: int = 0) -> list[int]:
    """Split ``total`` lines across items in proportion to ``weights``.

    Each share is rounded and raised to at least ``floor``. Shares are
    not capped here; callers stop spending once their running
    remainder is exhausted. Zero total weight splits evenly.
    """
    if not weights:
        return []
    weight_sum = sum(weights)
    if weight_sum <= 0:
        even = total // len(weights)
        return [max(floor, even) for _ in weights]
    return [max(floor, round(total * w / weight_sum)) for w in weights]


def first_sentence(paragraph: str, limit: int = SENTENCE_FALLBACK_CHARS) -> str:
    """First sentence of a paragraph, or its first ``limit`` characters."""
    text = " ".join(line.strip() for line in paragraph.split("\n") if line.strip())
    text = _LIST_MARKER_RE.sub("", text)
    match = _SENTENCE_RE.match(text)
    if match:
        return match.group(1)
    return text[:limit]


def split_paragraphs(lines: Sequence[str]) -> list[str]:
    """Group lines into blank-line-delimited paragraphs."""
    paragraphs: list[str] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            paragraphs.append("\n".join(current))
            current = []
    if current:
        paragraphs.append("\n".join(current))
    return paragraphs


def digest_prose(
    lines: Sequence[str],
    budget: int,
    rules_first: bool = False,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """Fit prose into ``budget`` lines.

    Prose that already fits is kept verbatim minus blank lines. Otherwise
    each paragraph becomes one bullet holding its first sentence, with
    do/don't lines first when ``rules_first`` is set.
    """
    if budget <= 0:
        return []
    non_blank = [line.rstrip() for line in lines if line.strip()]
    if len(non_blank) <= budget:
        return non_blank

    bullets: list[str] = []
    if rules_first:
        for line in non_blank:
            polarity = classify_rule(line, vocabulary)
            if polarity == NEUTRAL:
                continue
            prefix = "DON'T" if polarity == NEGATIVE else "DO"
            bullets.append(f"- {prefix}: {clean_rule_text(line, vocabulary)}")
    for paragraph in split_paragraphs(lines):
        sentence = first_sentence(paragraph)
        if sentence:
            bullets.append(f"- {sentence}")
    return bullets[:budget]


def _section_prose(section: Section) -> list[str]:
    text = "\n".join(prose_lines(section.body))
    return strip_links(strip_html(text)).split("\n")


def _cleaned_blocks(section: Section, languages: Sequence[str] | None) -> list[CodeBlock]:
    blocks = []
    for block in section.code_blocks:
        if not is_target_block(block, languages):
            continue
        cleaned = clean_twoslash(block.text)
        if cleaned:
            blocks.append(CodeBlock(block.language, cleaned, block.annotated))
    return blocks


def condense_section(
    section: Section,
    budget: int,
    heading: str | None = None,
    priorities: Sequence[str] = (),
    languages: Sequence[str] | None = TARGET_LANGUAGES,
    window: SizeWindow = SWEET_SPOT,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """Condense one section into at most ``budget`` lines.

    Returns an empty list when nothing but the heading would survive.
    """
    head = [f"### {heading}"] if heading else []
    remaining = budget - len(head)
    if remaining <= 0:
        return []

    prose_budget = int(remaining * PROSE_SHARE)
    code_budget = remaining - prose_budget

    rules_first = bool(RULE_PRIORITIES.intersection(priorities))
    prose = digest_prose(_section_prose(section), prose_budget, rules_first, vocabulary)

    code: list[str] = []
    if code_budget > MIN_CODE_BUDGET:
        best = select_best_block(_cleaned_blocks(section, languages), window)
        if best is not None and best.line_count + FENCE_LINES <= code_budget:
            code = [f"```{best.language}", *best.text.split("\n"), "```"]

    if not prose and not code:
        return []
    return head + prose + code


def condense_doc(
    doc: Document,
    budget: int,
    priorities: Sequence[str] = (),
    languages: Sequence[str] | None = TARGET_LANGUAGES,
    window: SizeWindow = SWEET_SPOT,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Condense a whole document into at most ``budget`` lines.

    Sections are visited in document order; once the running remainder
    reaches zero the remaining sections are dropped. A generic child
    heading that resolves to the heading just written continues under it.
    """
    if budget <= TITLE_LINES:
        return ""

    title = strip_links(get_title(doc))
    available = budget - TITLE_LINES
    shares = allocate_budgets(
        [s.body_line_count for s in doc.sections], available, floor=MIN_SECTION_LINES,
    )

    body: list[str] = []
    remaining = available
    last_heading = title
    for section, share in zip(doc.sections, shares):
        if remaining <= 0:
            break
        heading = resolve_heading(section, title)
        block = condense_section(
            section,
            min(share, remaining),
            heading=None if heading in (title, last_heading) else heading,
            priorities=priorities,
            languages=languages,
            window=window,
            vocabulary=vocabulary,
        )
        if block:
            last_heading = heading
        body.extend(block)
        remaining -= len(block)

    if not body:
        return ""
    return "\n".join([f"## {title}", "", *body])
