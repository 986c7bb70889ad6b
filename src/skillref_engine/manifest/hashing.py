"""SHA-256 helpers for files and text."""

from __future__ import annotations

import hashlib
from pathlib import Path

_FILE_READ_CHUNK_BYTES = 1024 * 1024


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_text(text: str, *, encoding: str = "utf-8") -> str:
    """Return SHA-256 hex digest for text encoded with ``encoding``."""
    return sha256_bytes(text.encode(encoding))


def sha256_file(path: Path | str, *, chunk_size: int = _FILE_READ_CHUNK_BYTES) -> str:
    """Return SHA-256 hex digest for a file read in chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    digest = hashlib.sha256()
    with Path(path).open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def count_lines(text: str) -> int:
    """Newline-delimited line count; a trailing newline adds an empty line."""
    return len(text.split("\n"))
