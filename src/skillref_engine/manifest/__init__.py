"""Manifest module — content-addressed source/output ledger and drift detection."""

from skillref_engine.manifest.builder import (
    Manifest,
    ManifestError,
    OutputEntry,
    SourceEntry,
    VerifyResult,
    build_manifest,
    read_manifest,
    verify_manifest,
    write_manifest,
)
from skillref_engine.manifest.drift import DriftReport, compare_manifest, detect_drift, format_drift_report
from skillref_engine.manifest.hashing import sha256_file, sha256_text

__all__ = [
    "Manifest",
    "ManifestError",
    "OutputEntry",
    "SourceEntry",
    "VerifyResult",
    "build_manifest",
    "read_manifest",
    "verify_manifest",
    "write_manifest",
    "DriftReport",
    "compare_manifest",
    "detect_drift",
    "format_drift_report",
    "sha256_file",
    "sha256_text",
]
