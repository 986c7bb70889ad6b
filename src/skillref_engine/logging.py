"""Logging for skillref runs.

Library modules log through ``get_logger(<area>)``; reports meant for
the user are printed by the CLI. ``configure_logging`` is called once
per CLI invocation and wires the ``skillref`` logger to stderr and,
optionally, a log file that always records debug detail.
"""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "skillref"
CONSOLE_FORMAT = "[skillref] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(area: str | None = None) -> logging.Logger:
    """Logger for one area of the package, e.g. ``get_logger("drift")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{area}" if area else ROOT_LOGGER)


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(
    *, verbose: bool = False, log_file: Path | str | None = None
) -> logging.Logger:
    """Route skillref logging to stderr, and to ``log_file`` when given.

    The console shows INFO and up (DEBUG with ``verbose``). The file
    sink records everything at DEBUG. Calling this again
    replaces the handlers from the previous call.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.propagate = False
    _drop_handlers(logger)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is None:
        logger.setLevel(console_level)
        return logger

    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    sink = logging.FileHandler(path, encoding="utf-8")
    sink.setLevel(logging.DEBUG)
    sink.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(sink)
    logger.setLevel(logging.DEBUG)
    return logger


__all__ = ["configure_logging", "get_logger"]
