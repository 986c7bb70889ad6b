"""Source-to-output mappings for the reference build.

Each reference artifact is described by an :class:`OutputSpec`: the
source patterns it reads (relative to the docs root), its line budget,
its content priorities, and the generator kind that produces it.

The default mapping targets the TypeScript-Website documentation. A
different documentation set can be described in YAML and loaded with
:func:`load_output_specs`::

    outputs:
      guide.md:
        sources: ["docs/**/*.md"]
        max_lines: 200
        priorities: [code-examples]
        kind: condensed
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

KIND_CONDENSED = "condensed"
KIND_RULES = "rules"
KIND_CHECKLIST = "checklist"
KIND_TEMPLATES = "templates"
KIND_OPTIONS = "options"

VALID_KINDS = frozenset({KIND_CONDENSED, KIND_RULES, KIND_CHECKLIST, KIND_TEMPLATES, KIND_OPTIONS})

VALID_PRIORITIES = frozenset({
    "code-examples", "type-rules", "gotchas", "signatures", "patterns",
    "constraints", "syntax", "options", "templates", "checklists",
})


@dataclass(frozen=True)
class OutputSpec:
    """How one reference artifact is produced."""

    name: str
    sources: tuple[str, ...]
    max_lines: int
    priorities: tuple[str, ...] = ()
    kind: str = KIND_CONDENSED
    title: str | None = None


DOC_ROOT = "packages/documentation/copy/en"
TSCONFIG_ROOT = "packages/tsconfig-reference/copy/en"
GLOSSARY_ROOT = "packages/glossary/copy/en"

# Scanned by drift detection for documentation files not yet in the manifest.
DOC_SCAN_PATTERNS = (
    f"{DOC_ROOT}/**/*.md",
    f"{TSCONFIG_ROOT}/**/*.md",
    f"{GLOSSARY_ROOT}/**/*.md",
)

# Never tracked as sources, matched fnmatch-style against relative paths.
EXCLUDED_PATTERNS = (
    "**/node_modules/**",
    "**/.git/**",
    "**/package.json",
    "**/tsconfig.json",
)


def _spec(name: str, sources: list[str], max_lines: int, priorities: list[str], kind: str = KIND_CONDENSED) -> OutputSpec:
    return OutputSpec(name, tuple(sources), max_lines, tuple(priorities), kind)


DEFAULT_OUTPUT_SPECS: dict[str, OutputSpec] = {
    spec.name: spec
    for spec in [
        _spec("type-system-core.md", [
            f"{DOC_ROOT}/handbook-v2/Basics.md",
            f"{DOC_ROOT}/handbook-v2/Everyday Types.md",
            f"{DOC_ROOT}/handbook-v2/Narrowing.md",
            f"{DOC_ROOT}/handbook-v2/Object Types.md",
            f"{DOC_ROOT}/reference/Type Compatibility.md",
            f"{DOC_ROOT}/reference/Type Inference.md",
        ], 350, ["code-examples", "type-rules", "gotchas"]),
        _spec("functions-and-classes.md", [
            f"{DOC_ROOT}/handbook-v2/More on Functions.md",
            f"{DOC_ROOT}/handbook-v2/Classes.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Generics.md",
        ], 400, ["signatures", "patterns", "constraints"]),
        _spec("type-manipulation.md", [
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/_Creating Types from Types.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Conditional Types.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Mapped Types.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Template Literal Types.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Indexed Access Types.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Keyof Type Operator.md",
            f"{DOC_ROOT}/handbook-v2/Type Manipulation/Typeof Type Operator.md",
        ], 350, ["syntax", "patterns", "code-examples"]),
        _spec("utility-types.md", [
            f"{DOC_ROOT}/reference/Utility Types.md",
        ], 250, ["signatures", "code-examples", "gotchas"]),
        _spec("modules-and-namespaces.md", [
            f"{DOC_ROOT}/handbook-v2/Modules.md",
            f"{DOC_ROOT}/modules-reference/Introduction.md",
            f"{DOC_ROOT}/modules-reference/Theory.md",
            f"{DOC_ROOT}/modules-reference/Reference.md",
            f"{DOC_ROOT}/reference/Namespaces.md",
            f"{DOC_ROOT}/reference/Namespaces and Modules.md",
        ], 300, ["patterns", "gotchas", "code-examples"]),
        _spec("tsconfig-guide.md", [
            f"{DOC_ROOT}/project-config/tsconfig.json.md",
            f"{DOC_ROOT}/project-config/Compiler Options.md",
            f"{DOC_ROOT}/project-config/Project References.md",
            f"{DOC_ROOT}/project-config/Configuring Watch.md",
            f"{DOC_ROOT}/project-config/Integrating with Build Tools.md",
            f"{DOC_ROOT}/modules-reference/guides/Choosing Compiler Options.md",
        ], 300, ["options", "patterns", "gotchas"]),
        _spec("tsconfig-options-reference.md", [
            f"{TSCONFIG_ROOT}/options/*.md",
        ], 400, ["options", "gotchas"], KIND_OPTIONS),
        _spec("declaration-files.md", [
            f"{DOC_ROOT}/declaration-files/Introduction.md",
            f"{DOC_ROOT}/declaration-files/By Example.md",
            f"{DOC_ROOT}/declaration-files/Do's and Don'ts.md",
            f"{DOC_ROOT}/declaration-files/Deep Dive.md",
            f"{DOC_ROOT}/declaration-files/Library Structures.md",
            f"{DOC_ROOT}/declaration-files/Publishing.md",
            f"{DOC_ROOT}/declaration-files/Consumption.md",
        ], 200, ["patterns", "gotchas", "code-examples"], KIND_RULES),
        _spec("code-review-checklist.md", [
            f"{DOC_ROOT}/handbook-v2/Basics.md",
            f"{DOC_ROOT}/handbook-v2/Narrowing.md",
            f"{DOC_ROOT}/handbook-v2/Everyday Types.md",
            f"{DOC_ROOT}/reference/Utility Types.md",
            f"{DOC_ROOT}/declaration-files/Do's and Don'ts.md",
            f"{DOC_ROOT}/reference/Enums.md",
            f"{DOC_ROOT}/reference/Decorators.md",
        ], 250, ["gotchas", "type-rules", "checklists"], KIND_CHECKLIST),
        _spec("project-templates.md", [
            f"{DOC_ROOT}/project-config/tsconfig.json.md",
            f"{DOC_ROOT}/project-config/Compiler Options.md",
            f"{TSCONFIG_ROOT}/options/*.md",
        ], 300, ["templates", "options", "patterns"], KIND_TEMPLATES),
    ]
}


def spec_from_dict(name: str, data: dict) -> OutputSpec:
    """Build an OutputSpec from a YAML/JSON mapping entry.

    Raises:
        ValueError: On missing sources, a non-positive budget, an unknown
            kind, or an unknown priority tag.
    """
    sources = data.get("sources") or []
    if isinstance(sources, str):
        sources = [sources]
    if not sources:
        raise ValueError(f"Output '{name}' has no sources")

    max_lines = data.get("max_lines", data.get("maxLines"))
    if not isinstance(max_lines, int) or max_lines <= 0:
        raise ValueError(f"Output '{name}' needs a positive max_lines, got {max_lines!r}")

    kind = data.get("kind", KIND_CONDENSED)
    if kind not in VALID_KINDS:
        raise ValueError(f"Output '{name}' has unknown kind '{kind}'")

    priorities = tuple(data.get("priorities") or ())
    unknown = [p for p in priorities if p not in VALID_PRIORITIES]
    if unknown:
        raise ValueError(f"Output '{name}' has unknown priorities: {', '.join(unknown)}")

    return OutputSpec(
        name=name,
        sources=tuple(str(s) for s in sources),
        max_lines=max_lines,
        priorities=priorities,
        kind=kind,
        title=data.get("title"),
    )


def load_output_specs(path: Path | str) -> dict[str, OutputSpec]:
    """Load output specs from a YAML file.

    The file holds a mapping under ``outputs`` (or at top level) from
    artifact name to spec fields.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        ValueError: If the structure or an entry is invalid.
    """
    config_path = Path(path)
    with open(config_path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Output config at {config_path} is not a YAML mapping")

    outputs = data.get("outputs", data)
    if not isinstance(outputs, dict):
        raise ValueError(f"'outputs' in {config_path} is not a mapping")

    return {name: spec_from_dict(name, entry or {}) for name, entry in outputs.items()}



def scan_patterns_for(specs: Mapping[str, OutputSpec]) -> tuple[str, ...]:
    """Every source pattern the specs read, in order and de-duplicated.

    Drift detection scans these for documentation files the manifest
    has not seen yet.
    """
    return tuple(dict.fromkeys(p for spec in specs.values() for p in spec.sources))
