"""Drift check and manifest verification CLI commands."""

import argparse
import json

import yaml

from skillref_engine.manifest import (
    ManifestError,
    format_drift_report,
    read_manifest,
    verify_manifest,
)
from skillref_engine.outputs import DOC_SCAN_PATTERNS, load_output_specs, scan_patterns_for


def cmd_check(args: argparse.Namespace) -> int:
    from skillref_engine.pipeline import run_check

    scan_patterns = DOC_SCAN_PATTERNS
    config = getattr(args, "config", None)
    if config:
        try:
            scan_patterns = scan_patterns_for(load_output_specs(config))
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"ERROR: Could not load output config: {e}")
            return 1

    try:
        report = run_check(args.manifest, args.docs_root, scan_patterns)
    except FileNotFoundError:
        print(f"ERROR: {args.manifest} not found. Run `skillref build` first.")
        return 1
    except ManifestError as e:
        print(f"ERROR: {e}")
        return 1

    if getattr(args, "json", False):
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_drift_report(report))
    return 1 if report.has_drift else 0


def cmd_verify(args: argparse.Namespace) -> int:
    try:
        manifest = read_manifest(args.manifest)
    except FileNotFoundError:
        print(f"ERROR: {args.manifest} not found. Run `skillref build` first.")
        return 1
    except ManifestError as e:
        print(f"ERROR: {e}")
        return 1

    result = verify_manifest(manifest, docs_root=args.docs_root, output_dir=args.skill_dir)
    print(result.summary())
    return 0 if result.passed else 1
