"""Command-line interface for skillref.

Usage:
    skillref build [--config <outputs.yaml>]
    skillref check [--json] [--config <outputs.yaml>]
    skillref diff [--config <outputs.yaml>]
    skillref verify

Global options:
    --docs-root <dir>   Documentation checkout (default: $SKILLREF_DOCS_ROOT or ./TypeScript-Website)
    --skill-dir <dir>   Generated skill directory (default: $SKILLREF_SKILL_DIR or ./.claude/skills/typescript)
    --manifest <file>   Manifest location (default: $SKILLREF_MANIFEST or ./manifest.json)
    --verbose           Debug logging
    --log-file <file>   Debug log file (default: $SKILLREF_LOG_FILE, or none)
"""

import argparse
import sys
from pathlib import Path

from skillref_engine import paths
from skillref_engine.cli.manifest import cmd_check, cmd_verify
from skillref_engine.cli.skill import cmd_build, cmd_diff
from skillref_engine.logging import configure_logging


def resolve_locations(args: argparse.Namespace) -> argparse.Namespace:
    """Fill unset location options from the environment-driven defaults."""
    args.docs_root = Path(args.docs_root) if args.docs_root else paths.docs_root()
    args.skill_dir = Path(args.skill_dir) if args.skill_dir else paths.skill_dir()
    args.manifest = Path(args.manifest) if args.manifest else paths.manifest_path()
    args.log_file = Path(args.log_file) if args.log_file else paths.log_file()
    return args


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillref",
        description="Condense documentation into budgeted reference files and track drift",
    )
    parser.add_argument(
        "--docs-root", default=None,
        help="Documentation checkout the sources are read from",
    )
    parser.add_argument(
        "--skill-dir", default=None,
        help="Directory SKILL.md and refs/ are written to",
    )
    parser.add_argument(
        "--manifest", default=None,
        help="Path to manifest.json",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file", default=None,
        help="Also write a debug log to this file",
    )
    sub = parser.add_subparsers(dest="command")

    build = sub.add_parser("build", help="Generate reference files, SKILL.md and the manifest")
    build.add_argument(
        "--config", default=None,
        help="YAML file describing the outputs (default: built-in TypeScript mapping)",
    )

    check = sub.add_parser("check", help="Detect drift between docs and the stored manifest")
    check.add_argument("--json", action="store_true", help="Print the report as JSON")
    check.add_argument(
        "--config", default=None,
        help="YAML file whose source patterns are scanned for added docs (default: built-in TypeScript paths)",
    )

    diff = sub.add_parser("diff", help="Show what a build would change, without writing")
    diff.add_argument(
        "--config", default=None,
        help="YAML file describing the outputs (default: built-in TypeScript mapping)",
    )

    sub.add_parser("verify", help="Check the manifest against the files it records")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    resolve_locations(args)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    dispatch = {
        "build": cmd_build,
        "check": cmd_check,
        "diff": cmd_diff,
        "verify": cmd_verify,
    }
    return dispatch[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
