"""Build, check, and diff runs over a docs tree and a skill directory.

These functions hold the orchestration the CLI commands share; they
return result objects and leave presentation to the caller.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from skillref_engine.assemble import Artifact, generate_all
from skillref_engine.condense.templates import generate_skill_md
from skillref_engine.logging import get_logger
from skillref_engine.manifest import (
    DriftReport,
    Manifest,
    build_manifest,
    detect_drift,
    write_manifest,
)
from skillref_engine.manifest.hashing import count_lines, sha256_text
from skillref_engine.outputs import DOC_SCAN_PATTERNS, OutputSpec
from skillref_engine.paths import SOURCE_REPO

logger = get_logger("pipeline")

SKILL_FILE = "SKILL.md"
REFS_SUBDIR = "refs"
UNKNOWN_COMMIT = "unknown"


def _run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run a git command and return the result."""
    return subprocess.run(
        ["git"] + args,
        cwd=cwd,
        capture_output=True,
        text=True,
    )


def source_revision(docs_root: Path | str) -> str:
    """Return the docs checkout's HEAD commit, or "unknown" if git can't say."""
    try:
        result = _run_git(["rev-parse", "HEAD"], Path(docs_root))
    except OSError as e:
        logger.warning("Could not determine docs repo commit hash: %s", e)
        return UNKNOWN_COMMIT
    commit = result.stdout.strip()
    if result.returncode != 0 or not commit:
        logger.warning("Could not determine docs repo commit hash")
        return UNKNOWN_COMMIT
    return commit


@dataclass
class BuildResult:
    """What a build wrote."""

    source_commit: str
    artifacts: list[Artifact] = field(default_factory=list)
    skill_lines: int = 0
    manifest: Manifest | None = None

    def summary(self) -> str:
        lines = [f"Source commit: {self.source_commit}"]
        for artifact in self.artifacts:
            note = " (truncated)" if artifact.truncated else ""
            lines.append(
                f"  {artifact.name}: {artifact.line_count} lines "
                f"(from {len(artifact.source_files)} sources){note}"
            )
        lines.append(f"  {SKILL_FILE}: {self.skill_lines} lines")
        if self.manifest is not None:
            lines.append(
                f"  Manifest: {len(self.manifest.sources)} source files, "
                f"{len(self.manifest.outputs)} output files"
            )
        return "\n".join(lines)


def run_build(
    specs: Mapping[str, OutputSpec],
    docs_root: Path | str,
    skill_dir: Path | str,
    manifest_path: Path | str,
    source_repo: str = SOURCE_REPO,
) -> BuildResult:
    """Generate every artifact and SKILL.md, then record a fresh manifest."""
    docs = Path(docs_root)
    skill = Path(skill_dir)
    refs = skill / REFS_SUBDIR
    refs.mkdir(parents=True, exist_ok=True)

    result = BuildResult(source_commit=source_revision(docs))
    source_mappings: dict[str, list[str]] = {}

    for artifact in generate_all(specs, docs):
        (refs / artifact.name).write_text(artifact.content, encoding="utf-8")
        source_mappings[artifact.name] = list(artifact.source_files)
        result.artifacts.append(artifact)
        logger.info("Wrote %s (%d lines)", artifact.name, artifact.line_count)

    skill_content = generate_skill_md(result.source_commit, source_repo)
    (skill / SKILL_FILE).write_text(skill_content, encoding="utf-8")
    result.skill_lines = count_lines(skill_content)
    source_mappings[SKILL_FILE] = []

    result.manifest = build_manifest(
        docs, skill, result.source_commit, source_repo, source_mappings
    )
    write_manifest(result.manifest, manifest_path)
    logger.info("Manifest written to %s", manifest_path)
    return result


def run_check(
    manifest_path: Path | str,
    docs_root: Path | str,
    scan_patterns: Sequence[str] = DOC_SCAN_PATTERNS,
) -> DriftReport:
    """Compare the docs tree against the stored manifest.

    Files matching ``scan_patterns`` that the manifest never recorded
    are reported as added.

    Raises:
        FileNotFoundError: If no manifest has been written yet.
        ManifestError: If the manifest is malformed.
    """
    return detect_drift(manifest_path, docs_root, scan_patterns)


DIFF_NEW = "NEW"
DIFF_UNCHANGED = "UNCHANGED"
DIFF_CHANGED = "CHANGED"


@dataclass
class DiffEntry:
    name: str
    status: str
    old_lines: int = 0
    new_lines: int = 0

    def describe(self) -> str:
        if self.status == DIFF_NEW:
            return f"NEW: {self.name} ({self.new_lines} lines)"
        if self.status == DIFF_CHANGED:
            return f"CHANGED: {self.name} ({self.old_lines} → {self.new_lines} lines)"
        return f"UNCHANGED: {self.name}"


def _diff_against(name: str, path: Path, content: str) -> DiffEntry:
    new_lines = count_lines(content)
    try:
        existing = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return DiffEntry(name, DIFF_NEW, new_lines=new_lines)
    if sha256_text(existing) == sha256_text(content):
        return DiffEntry(name, DIFF_UNCHANGED, count_lines(existing), new_lines)
    return DiffEntry(name, DIFF_CHANGED, count_lines(existing), new_lines)


def run_diff(
    specs: Mapping[str, OutputSpec],
    docs_root: Path | str,
    skill_dir: Path | str,
    source_repo: str = SOURCE_REPO,
) -> list[DiffEntry]:
    """Regenerate everything in memory and compare with what's on disk. Writes nothing."""
    docs = Path(docs_root)
    skill = Path(skill_dir)
    refs = skill / REFS_SUBDIR

    entries = [
        _diff_against(artifact.name, refs / artifact.name, artifact.content)
        for artifact in generate_all(specs, docs)
    ]
    skill_content = generate_skill_md(source_revision(docs), source_repo)
    entries.append(_diff_against(SKILL_FILE, skill / SKILL_FILE, skill_content))
    return entries
