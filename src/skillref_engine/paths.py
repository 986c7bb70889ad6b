"""Default path resolution.

Resolves canonical locations of the documentation checkout, the skill
output directory and the manifest. Uses environment variables when
available, falls back to conventional locations under the current
directory.

Environment variables:
    SKILLREF_DOCS_ROOT — documentation checkout (default: ./TypeScript-Website)
    SKILLREF_SKILL_DIR — generated skill directory (default: ./.claude/skills/typescript)
    SKILLREF_MANIFEST — manifest file (default: ./manifest.json)
    SKILLREF_LOG_FILE — debug log file (default: none)
"""

from __future__ import annotations

import os
from pathlib import Path

DOCS_REPO_DIR = "TypeScript-Website"
SKILL_OUTPUT_DIR = ".claude/skills/typescript"
MANIFEST_NAME = "manifest.json"
SOURCE_REPO = "microsoft/TypeScript-Website"


def project_root() -> Path:
    """Return the directory the default locations are relative to."""
    return Path.cwd()


def docs_root() -> Path:
    """Return the documentation checkout root."""
    env = os.environ.get("SKILLREF_DOCS_ROOT")
    if env:
        return Path(env)
    return project_root() / DOCS_REPO_DIR


def skill_dir() -> Path:
    """Return the generated skill directory."""
    env = os.environ.get("SKILLREF_SKILL_DIR")
    if env:
        return Path(env)
    return project_root() / SKILL_OUTPUT_DIR


def manifest_path() -> Path:
    """Return the path to manifest.json."""
    env = os.environ.get("SKILLREF_MANIFEST")
    if env:
        return Path(env)
    return project_root() / MANIFEST_NAME


def log_file() -> Path | None:
    """Return the debug log file, or None when file logging is off."""
    env = os.environ.get("SKILLREF_LOG_FILE")
    return Path(env) if env else None
