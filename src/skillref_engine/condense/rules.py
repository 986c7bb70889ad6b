"""Rule and contrastive-example extraction for checklist-style references.

Prose lines with a do/don't polarity become rules; code examples are
tagged wrong/right from their markers. Both are grouped under a resolved
heading, and a wrong example is shown next to the nearest right example
under the same heading.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from skillref_engine.condense.classify import (
    DEFAULT_VOCABULARY,
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    RIGHT,
    TARGET_LANGUAGES,
    WRONG,
    RuleVocabulary,
    SizeWindow,
    classify_rule,
    clean_rule_text,
    detect_annotation,
    is_target_block,
    resolve_heading,
)
from skillref_engine.extract.cleaning import clean_twoslash, strip_html, strip_links
from skillref_engine.extract.document import get_title
from skillref_engine.extract.models import Document
from skillref_engine.extract.sections import prose_lines

EXAMPLE_WINDOW = SizeWindow(3, 12)
MAX_WRONG_LINES = 12


@dataclass(frozen=True)
class CodeExample:
    heading: str
    code: str
    annotation: str | None = None

    @property
    def lines(self) -> int:
        return len(self.code.split("\n"))


@dataclass(frozen=True)
class Rule:
    heading: str
    polarity: str
    text: str


def rule_prefix(polarity: str) -> str:
    if polarity == NEGATIVE:
        return "- DON'T: "
    if polarity == POSITIVE:
        return "- DO: "
    return "- "


def extract_code_examples(
    doc: Document,
    languages: Sequence[str] | None = TARGET_LANGUAGES,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> list[CodeExample]:
    """All target-language code examples of a doc, tagged with their resolved heading."""
    title = get_title(doc)
    examples: list[CodeExample] = []
    for section in doc.sections:
        heading = resolve_heading(section, title)
        for block in section.code_blocks:
            if not is_target_block(block, languages):
                continue
            cleaned = clean_twoslash(block.text)
            if not cleaned:
                continue
            examples.append(CodeExample(
                heading=heading,
                code=cleaned,
                annotation=detect_annotation(block, section.body, vocabulary),
            ))
    return examples


def extract_rules(
    doc: Document,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> list[Rule]:
    """Actionable do/don't rules from a doc's prose."""
    title = get_title(doc)
    rules: list[Rule] = []
    for section in doc.sections:
        heading = resolve_heading(section, title)
        content = strip_links(strip_html("\n".join(prose_lines(section.body))))
        for line in content.split("\n"):
            polarity = classify_rule(line, vocabulary)
            if polarity == NEUTRAL:
                continue
            rules.append(Rule(heading, polarity, clean_rule_text(line, vocabulary)))
    return rules


def select_best_example(examples: Sequence[CodeExample]) -> CodeExample | None:
    """Pick the example to show for a heading.

    A short wrong example wins because it can be paired; then the
    shortest example inside the 3-12 line window; then the shortest.
    """
    if not examples:
        return None
    for ex in examples:
        if ex.annotation == WRONG and ex.lines <= MAX_WRONG_LINES:
            return ex
    ranked = sorted(examples, key=lambda e: e.lines)
    for ex in ranked:
        if ex.lines in EXAMPLE_WINDOW:
            return ex
    return ranked[0]


def pair_contrastive(
    best: CodeExample,
    examples: Sequence[CodeExample],
) -> CodeExample | None:
    """Nearest right example to a wrong one, by position in ``examples``."""
    if best.annotation != WRONG:
        return None
    origin = next(i for i, ex in enumerate(examples) if ex is best)
    candidates = [
        (abs(i - origin), i, ex)
        for i, ex in enumerate(examples)
        if ex.annotation == RIGHT and ex is not best
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda c: (c[0], c[1]))[2]


def _fence(code: str) -> list[str]:
    return ["```ts", code, "```"]


def format_ref_file(
    title: str,
    docs: Sequence[tuple[Document, list[CodeExample], list[Rule]]],
    max_lines: int,
) -> str:
    """Format rules and examples of several docs into one reference file."""
    parts: list[str] = [f"# {title}", ""]
    line_count = 2

    for doc, examples, rules in docs:
        doc_title = get_title(doc)

        groups: dict[str, tuple[list[CodeExample], list[Rule]]] = {}
        for ex in examples:
            groups.setdefault(ex.heading, ([], []))[0].append(ex)
        for rule in rules:
            groups.setdefault(rule.heading, ([], []))[1].append(rule)

        if not groups:
            continue

        parts.extend([f"## {strip_links(doc_title)}", ""])
        line_count += 2

        for heading, (group_examples, group_rules) in groups.items():
            if line_count >= max_lines - 5:
                break

            if heading != doc_title:
                parts.extend([f"### {heading}", ""])
                line_count += 2

            # Rules first: they give the code its context.
            for rule in group_rules:
                if line_count >= max_lines - 3:
                    break
                parts.append(f"{rule_prefix(rule.polarity)}{rule.text}")
                line_count += 1

            if group_rules and group_examples:
                parts.append("")
                line_count += 1

            best = select_best_example(group_examples)
            if best is None or line_count + best.lines + 3 >= max_lines:
                continue

            if best.annotation == WRONG:
                parts.append("Wrong:")
                line_count += 1
            elif best.annotation == RIGHT:
                parts.append("Right:")
                line_count += 1
            parts.extend(_fence(best.code) + [""])
            line_count += best.lines + 3

            right = pair_contrastive(best, group_examples)
            if right is not None and line_count + right.lines + 4 < max_lines:
                parts.append("Right:")
                parts.extend(_fence(right.code) + [""])
                line_count += right.lines + 4

    return "\n".join(parts)


def generate_rules_ref(
    title: str,
    docs: Sequence[Document],
    max_lines: int,
    languages: Sequence[str] | None = TARGET_LANGUAGES,
    vocabulary: RuleVocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Extract rules and examples from ``docs`` and format them under ``title``."""
    return format_ref_file(
        title,
        [
            (doc, extract_code_examples(doc, languages, vocabulary), extract_rules(doc, vocabulary))
            for doc in docs
        ],
        max_lines,
    )
