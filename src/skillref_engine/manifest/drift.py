"""Detect source-documentation drift against a recorded manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Sequence

from skillref_engine.logging import get_logger
from skillref_engine.manifest.builder import Manifest, read_manifest
from skillref_engine.manifest.hashing import sha256_file
from skillref_engine.outputs import DOC_SCAN_PATTERNS, EXCLUDED_PATTERNS

logger = get_logger("drift")

NO_DRIFT_MESSAGE = "No drift detected. Skill is up-to-date with source docs."


@dataclass
class DriftReport:
    """Changes in the docs tree since the manifest was built."""

    changed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    affected_outputs: list[str] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return bool(self.changed or self.added or self.removed)

    def summary(self) -> str:
        return (
            f"{len(self.changed)} changed, {len(self.added)} added, "
            f"{len(self.removed)} removed, {len(self.affected_outputs)} outputs affected"
        )

    def to_dict(self) -> dict:
        return {
            "hasDrift": self.has_drift,
            "changed": list(self.changed),
            "added": list(self.added),
            "removed": list(self.removed),
            "affectedOutputs": list(self.affected_outputs),
        }


def is_excluded(rel_path: str, excluded: Sequence[str] = EXCLUDED_PATTERNS) -> bool:
    return any(fnmatch(rel_path, pattern) for pattern in excluded)


def scan_docs(
    docs_root: Path | str,
    scan_patterns: Sequence[str] = DOC_SCAN_PATTERNS,
    excluded: Sequence[str] = EXCLUDED_PATTERNS,
) -> list[str]:
    """Sorted, de-duplicated relative paths of documentation files on disk."""
    root = Path(docs_root)
    found: set[str] = set()
    for pattern in scan_patterns:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            rel = path.relative_to(root).as_posix()
            if not is_excluded(rel, excluded):
                found.add(rel)
    return sorted(found)


def compare_manifest(
    manifest: Manifest,
    docs_root: Path | str,
    scan_patterns: Sequence[str] = DOC_SCAN_PATTERNS,
    excluded: Sequence[str] = EXCLUDED_PATTERNS,
) -> DriftReport:
    """Compare a loaded manifest against the docs tree.

    Recorded sources are re-hashed in manifest order: a missing or
    unreadable file is removed, a different digest is changed. Files
    matched by ``scan_patterns`` but never recorded are added. Affected
    outputs are the feeds-into targets of changed and removed sources;
    additions map to no known output and contribute none.
    """
    root = Path(docs_root)
    report = DriftReport()
    affected: dict[str, None] = {}

    for rel, entry in manifest.sources.items():
        path = root / rel
        try:
            current = sha256_file(path)
        except OSError as e:
            logger.debug("Recorded source unreadable, treating as removed: %s (%s)", rel, e)
            report.removed.append(rel)
            affected.update(dict.fromkeys(entry.feeds_into))
            continue
        if current != entry.hash:
            report.changed.append(rel)
            affected.update(dict.fromkeys(entry.feeds_into))

    report.added = [rel for rel in scan_docs(root, scan_patterns, excluded) if rel not in manifest.sources]
    report.affected_outputs = list(affected)
    return report


def detect_drift(
    manifest_path: Path | str,
    docs_root: Path | str,
    scan_patterns: Sequence[str] = DOC_SCAN_PATTERNS,
    excluded: Sequence[str] = EXCLUDED_PATTERNS,
) -> DriftReport:
    """Load the manifest at ``manifest_path`` and compare it against ``docs_root``.

    Raises:
        FileNotFoundError: If the manifest doesn't exist.
        ManifestError: If the manifest is malformed.
    """
    manifest = read_manifest(manifest_path)
    return compare_manifest(manifest, docs_root, scan_patterns, excluded)


def format_drift_report(report: DriftReport) -> str:
    """Render a drift report as plain text."""
    if not report.has_drift:
        return NO_DRIFT_MESSAGE

    lines = ["=== Drift Report ===", ""]
    if report.changed:
        lines.append(f"Changed ({len(report.changed)}):")
        lines.extend(f"  M {path}" for path in report.changed)
        lines.append("")
    if report.added:
        lines.append(f"Added ({len(report.added)}):")
        lines.extend(f"  A {path}" for path in report.added)
        lines.append("")
    if report.removed:
        lines.append(f"Removed ({len(report.removed)}):")
        lines.extend(f"  D {path}" for path in report.removed)
        lines.append("")
    if report.affected_outputs:
        lines.append(f"Affected outputs ({len(report.affected_outputs)}):")
        lines.extend(f"  → {name}" for name in report.affected_outputs)
        lines.append("")
    lines.append(report.summary())
    return "\n".join(lines)
