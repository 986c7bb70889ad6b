"""Build and diff CLI commands."""

import argparse

import yaml

from skillref_engine.outputs import DEFAULT_OUTPUT_SPECS, OutputSpec, load_output_specs


def _load_specs(args: argparse.Namespace) -> dict[str, OutputSpec]:
    config = getattr(args, "config", None)
    if config:
        return load_output_specs(config)
    return dict(DEFAULT_OUTPUT_SPECS)


def cmd_build(args: argparse.Namespace) -> int:
    from skillref_engine.pipeline import run_build

    try:
        specs = _load_specs(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Could not load output config: {e}")
        return 1

    print("Building skill from docs...")
    print(f"Docs root: {args.docs_root}")
    result = run_build(specs, args.docs_root, args.skill_dir, args.manifest)
    print(result.summary())
    truncated = [a.name for a in result.artifacts if a.truncated]
    if truncated:
        print(f"\n  Truncated to budget: {', '.join(truncated)}")
    print("\nBuild complete!")
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    from skillref_engine.pipeline import DIFF_UNCHANGED, run_diff

    try:
        specs = _load_specs(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Could not load output config: {e}")
        return 1

    print("Computing diff (dry run)...\n")
    entries = run_diff(specs, args.docs_root, args.skill_dir)
    for entry in entries:
        print(f"  {entry.describe()}")

    pending = sum(1 for e in entries if e.status != DIFF_UNCHANGED)
    print(f"\n  {pending} of {len(entries)} file(s) would change")
    print("\n[DRY RUN] No files were modified.")
    return 0
