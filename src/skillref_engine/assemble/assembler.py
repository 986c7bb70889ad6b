"""Reference artifact assembly.

For each output spec: resolve its source patterns against the docs
root, parse every source (skipping unreadable ones), run the generator
for its kind, and cap the result at its line budget.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from skillref_engine.condense.condenser import TITLE_LINES, allocate_budgets, condense_doc
from skillref_engine.condense.rules import generate_rules_ref
from skillref_engine.condense.templates import (
    generate_project_templates,
    generate_review_content,
    generate_tsconfig_reference,
)
from skillref_engine.extract.document import FrontmatterError, read_doc
from skillref_engine.extract.models import Document
from skillref_engine.extract.sections import is_fence
from skillref_engine.logging import get_logger
from skillref_engine.outputs import (
    KIND_CHECKLIST,
    KIND_CONDENSED,
    KIND_OPTIONS,
    KIND_RULES,
    KIND_TEMPLATES,
    OutputSpec,
)

logger = get_logger("assemble")

TRUNCATION_MARKER = "<!-- truncated -->"
GLOB_CHARS = "*?["


@dataclass(frozen=True)
class Artifact:
    """A generated reference file and the sources it was actually built from."""

    name: str
    content: str
    source_files: tuple[str, ...]
    truncated: bool = False

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n"))


def is_glob(pattern: str) -> bool:
    return any(c in pattern for c in GLOB_CHARS)


def resolve_sources(patterns: Sequence[str], docs_root: Path | str) -> list[str]:
    """Expand source patterns into relative POSIX paths.

    Literal paths are kept as given, even when missing. Glob matches are
    sorted so the result never depends on filesystem enumeration order.
    """
    root = Path(docs_root)
    resolved: list[str] = []
    for pattern in patterns:
        if is_glob(pattern):
            matches = sorted(
                p.relative_to(root).as_posix() for p in root.glob(pattern) if p.is_file()
            )
            resolved.extend(matches)
        else:
            resolved.append(pattern)
    return list(dict.fromkeys(resolved))


def load_docs(paths: Sequence[str], docs_root: Path | str) -> list[Document]:
    """Parse each path, in order, skipping files that cannot be read."""
    docs: list[Document] = []
    for rel_path in paths:
        try:
            docs.append(read_doc(docs_root, rel_path))
        except (OSError, UnicodeDecodeError, FrontmatterError) as e:
            logger.warning("Could not read %s, skipping: %s", rel_path, e)
    return docs


def title_case(name: str) -> str:
    """Title from an artifact name: "type-system-core.md" -> "Type System Core"."""
    stem = name[:-3] if name.endswith(".md") else name
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), stem.replace("-", " "))


def split_doc_budgets(docs: Sequence[Document], max_lines: int) -> list[int]:
    """Per-document budgets proportional to each document's raw body length."""
    return allocate_budgets([d.body_line_count for d in docs], max_lines - TITLE_LINES)


def generate_condensed_ref(spec: OutputSpec, docs: Sequence[Document]) -> str:
    parts = [f"# {spec.title or title_case(spec.name)}", ""]
    budgets = split_doc_budgets(docs, spec.max_lines)
    logger.debug("%s: per-document budgets %s", spec.name, budgets)

    for doc, budget in zip(docs, budgets):
        # One line of each share goes to the blank separator.
        condensed = condense_doc(doc, budget - 1, spec.priorities)
        if condensed.strip():
            parts.extend([condensed, ""])
    return "\n".join(parts)


def _rules_ref(spec: OutputSpec, docs: Sequence[Document]) -> str:
    return generate_rules_ref(spec.title or title_case(spec.name), docs, spec.max_lines)


def _checklist_ref(spec: OutputSpec, docs: Sequence[Document]) -> str:
    return generate_review_content(docs)


def _templates_ref(spec: OutputSpec, docs: Sequence[Document]) -> str:
    return generate_project_templates(docs)


def _options_ref(spec: OutputSpec, docs: Sequence[Document]) -> str:
    return generate_tsconfig_reference(docs)


GENERATORS: dict[str, Callable[[OutputSpec, Sequence[Document]], str]] = {
    KIND_CONDENSED: generate_condensed_ref,
    KIND_RULES: _rules_ref,
    KIND_CHECKLIST: _checklist_ref,
    KIND_TEMPLATES: _templates_ref,
    KIND_OPTIONS: _options_ref,
}


def enforce_budget(content: str, max_lines: int) -> tuple[str, bool]:
    """Cap ``content`` at ``max_lines``, appending a truncation marker on overflow.

    The marker adds two lines. A cut that would leave a code fence open
    moves back to just before that fence.
    """
    lines = content.split("\n")
    if len(lines) <= max_lines:
        return content, False

    kept = lines[:max_lines]
    fences = [i for i, line in enumerate(kept) if is_fence(line)]
    if len(fences) % 2:
        kept = kept[:fences[-1]]
    return "\n".join(kept) + "\n\n" + TRUNCATION_MARKER, True


def generate_artifact(spec: OutputSpec, docs_root: Path | str) -> Artifact:
    """Build one reference artifact from its spec."""
    paths = resolve_sources(spec.sources, docs_root)
    logger.debug("%s: %d source file(s)", spec.name, len(paths))
    docs = load_docs(paths, docs_root)

    generator = GENERATORS.get(spec.kind)
    if generator is None:
        raise ValueError(f"Unknown output kind '{spec.kind}' for {spec.name}")

    content, truncated = enforce_budget(generator(spec, docs), spec.max_lines)
    return Artifact(
        name=spec.name,
        content=content,
        source_files=tuple(doc.path for doc in docs),
        truncated=truncated,
    )


def generate_all(specs: Mapping[str, OutputSpec], docs_root: Path | str) -> list[Artifact]:
    """Build every configured artifact, in configuration order."""
    return [generate_artifact(spec, docs_root) for spec in specs.values()]
