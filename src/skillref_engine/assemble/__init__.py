"""Assembly — turn output specs into finished reference artifacts."""

from skillref_engine.assemble.assembler import (
    Artifact,
    enforce_budget,
    generate_all,
    generate_artifact,
    resolve_sources,
)

__all__ = [
    "Artifact",
    "enforce_budget",
    "generate_all",
    "generate_artifact",
    "resolve_sources",
]
