"""Build, persist, and verify manifest.json.

The manifest records a SHA-256 digest for every source document that fed
the build (with the outputs it feeds) and for every generated output
(with its line count and provenance). Drift detection compares a later
docs tree against it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Sequence

from skillref_engine.logging import get_logger
from skillref_engine.manifest.hashing import count_lines, sha256_file

logger = get_logger("manifest")

MANIFEST_VERSION = "1.0.0"
TEMPLATE_SOURCE = "template"
REFS_PREFIX = "refs/"
OUTPUT_GLOB = "**/*.md"

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


class ManifestError(ValueError):
    """A manifest file exists but does not hold a valid manifest."""


@dataclass
class SourceEntry:
    hash: str
    feeds_into: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"hash": self.hash, "feedsInto": list(self.feeds_into)}


@dataclass
class OutputEntry:
    hash: str
    lines: int
    generated_from: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"hash": self.hash, "lines": self.lines, "generatedFrom": list(self.generated_from)}


@dataclass
class Manifest:
    """Content-addressed record of one build."""

    source_repo: str
    source_commit: str
    build_date: str
    sources: dict[str, SourceEntry] = field(default_factory=dict)
    outputs: dict[str, OutputEntry] = field(default_factory=dict)
    version: str = MANIFEST_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "sourceRepo": self.source_repo,
            "sourceCommit": self.source_commit,
            "buildDate": self.build_date,
            "sources": {path: entry.to_dict() for path, entry in self.sources.items()},
            "outputs": {path: entry.to_dict() for path, entry in self.outputs.items()},
        }

    @classmethod
    def from_dict(cls, data: object) -> Manifest:
        """Parse a manifest mapping.

        Older manifests stored digests under ``sha256``; both keys are read.

        Raises:
            ManifestError: If a required field is missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ManifestError("Manifest is not a JSON object")
        for key in ("sourceRepo", "sourceCommit", "buildDate"):
            if not isinstance(data.get(key), str):
                raise ManifestError(f"Manifest field '{key}' is missing or not a string")

        raw_sources = data.get("sources", {})
        raw_outputs = data.get("outputs", {})
        if not isinstance(raw_sources, dict) or not isinstance(raw_outputs, dict):
            raise ManifestError("Manifest 'sources' and 'outputs' must be objects")

        sources = {}
        for path, entry in raw_sources.items():
            if not isinstance(entry, dict):
                raise ManifestError(f"Source entry '{path}' is not an object")
            sources[path] = SourceEntry(
                hash=_entry_hash(path, entry),
                feeds_into=[str(t) for t in entry.get("feedsInto", [])],
            )

        outputs = {}
        for path, entry in raw_outputs.items():
            if not isinstance(entry, dict):
                raise ManifestError(f"Output entry '{path}' is not an object")
            lines = entry.get("lines", 0)
            if not isinstance(lines, int):
                raise ManifestError(f"Output entry '{path}' has non-integer lines")
            outputs[path] = OutputEntry(
                hash=_entry_hash(path, entry),
                lines=lines,
                generated_from=[str(s) for s in entry.get("generatedFrom", [])],
            )

        return cls(
            source_repo=data["sourceRepo"],
            source_commit=data["sourceCommit"],
            build_date=data["buildDate"],
            sources=sources,
            outputs=outputs,
            version=str(data.get("version", MANIFEST_VERSION)),
        )


def _entry_hash(path: str, entry: dict) -> str:
    digest = entry.get("hash", entry.get("sha256"))
    if not isinstance(digest, str):
        raise ManifestError(f"Entry '{path}' has no hash")
    return digest


def output_aliases(target: str) -> tuple[str, str]:
    """Keys under which a feeds-into target may appear among the outputs."""
    return target, f"{REFS_PREFIX}{target}"


def _mapping_key(output_path: str) -> str:
    return output_path[len(REFS_PREFIX):] if output_path.startswith(REFS_PREFIX) else output_path


def _iso_now() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_manifest(
    docs_root: Path | str,
    output_dir: Path | str,
    source_commit: str,
    source_repo: str,
    source_mappings: Mapping[str, Sequence[str]],
    build_date: str | None = None,
) -> Manifest:
    """Hash every mapped source and every markdown output under ``output_dir``.

    Args:
        docs_root: Root the mapping's source paths are relative to.
        output_dir: Skill directory holding the generated outputs.
        source_commit: Revision of the docs tree, or "unknown".
        source_repo: Identifier of the docs repository.
        source_mappings: Output name to the source paths that fed it.
        build_date: ISO timestamp; defaults to now (UTC).

    Returns:
        The new Manifest. Sources that no longer exist are skipped with a
        warning.
    """
    docs = Path(docs_root)
    out = Path(output_dir)
    manifest = Manifest(
        source_repo=source_repo,
        source_commit=source_commit,
        build_date=build_date or _iso_now(),
    )

    for output_name, source_files in source_mappings.items():
        for rel in source_files:
            if rel in manifest.sources:
                feeds = manifest.sources[rel].feeds_into
                if output_name not in feeds:
                    feeds.append(output_name)
                continue
            path = docs / rel
            if not path.is_file():
                logger.warning("Source file not found, skipping: %s", rel)
                continue
            manifest.sources[rel] = SourceEntry(hash=sha256_file(path), feeds_into=[output_name])

    if out.is_dir():
        for path in sorted(out.glob(OUTPUT_GLOB)):
            if not path.is_file():
                continue
            rel = path.relative_to(out).as_posix()
            text = path.read_text(encoding="utf-8")
            mapped = list(source_mappings.get(_mapping_key(rel), ()))
            # Skipped sources have no entry to point at.
            recorded = [src for src in mapped if src in manifest.sources]
            manifest.outputs[rel] = OutputEntry(
                hash=sha256_file(path),
                lines=count_lines(text),
                generated_from=recorded if mapped else [TEMPLATE_SOURCE],
            )

    logger.debug(
        "Manifest built: %d sources, %d outputs", len(manifest.sources), len(manifest.outputs)
    )
    return manifest


def write_manifest(manifest: Manifest, path: Path | str) -> None:
    """Write the manifest as indented JSON with a trailing newline."""
    manifest_path = Path(path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest.to_dict(), f, indent=2, ensure_ascii=False)
        f.write("\n")


def read_manifest(path: Path | str) -> Manifest:
    """Load a manifest from disk.

    Raises:
        FileNotFoundError: If the manifest doesn't exist.
        ManifestError: If the file is not valid JSON or not a manifest.
    """
    manifest_path = Path(path)
    with open(manifest_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Manifest at {manifest_path} is not valid JSON: {e}") from e
    return Manifest.from_dict(data)


@dataclass
class VerifyResult:
    """Result of a manifest consistency check."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    sources_checked: int = 0
    outputs_checked: int = 0

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = [
            f"Manifest Verification: {self.sources_checked} sources, "
            f"{self.outputs_checked} outputs checked"
        ]
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  {w}")
        if self.passed and not self.warnings:
            lines.append("All checks passed.")
        return "\n".join(lines)


def verify_manifest(
    manifest: Manifest,
    docs_root: Path | str | None = None,
    output_dir: Path | str | None = None,
) -> VerifyResult:
    """Check a manifest's internal consistency, and optionally the files it records.

    Checks:
    - Every digest is a 64-char lowercase hex string
    - Every feeds-into target names a recorded output (bare or refs/ key)
    - Every generated-from path is a recorded source or the template marker
    - With ``docs_root``: every recorded source exists and still matches
    - With ``output_dir``: every recorded output exists and still matches

    Args:
        manifest: Manifest to check.
        docs_root: Root the recorded source paths are relative to.
        output_dir: Skill directory the outputs were written to.

    Returns:
        VerifyResult with errors and warnings.
    """
    result = VerifyResult()
    docs = Path(docs_root) if docs_root is not None else None

    if manifest.version != MANIFEST_VERSION:
        result.warnings.append(
            f"manifest version {manifest.version} differs from {MANIFEST_VERSION}"
        )

    for path, source in manifest.sources.items():
        result.sources_checked += 1
        if not _HEX_DIGEST_RE.match(source.hash):
            result.errors.append(f"{path}: malformed source hash")
        if not source.feeds_into:
            result.warnings.append(f"{path}: feeds no outputs")
        for target in source.feeds_into:
            if not any(alias in manifest.outputs for alias in output_aliases(target)):
                result.errors.append(f"{path}: feeds unknown output '{target}'")
        if docs is None:
            continue
        source_path = docs / path
        if not source_path.is_file():
            result.errors.append(f"{path}: source missing from {docs}")
        elif sha256_file(source_path) != source.hash:
            result.errors.append(f"{path}: source changed since build")

    out = Path(output_dir) if output_dir is not None else None
    for path, output in manifest.outputs.items():
        result.outputs_checked += 1
        if not _HEX_DIGEST_RE.match(output.hash):
            result.errors.append(f"{path}: malformed output hash")
        for src in output.generated_from:
            if src != TEMPLATE_SOURCE and src not in manifest.sources:
                result.errors.append(f"{path}: generated from unrecorded source '{src}'")
        if out is None:
            continue
        file_path = out / path
        if not file_path.is_file():
            result.errors.append(f"{path}: output missing from {out}")
        elif sha256_file(file_path) != output.hash:
            result.errors.append(f"{path}: output modified since build")

    return result
