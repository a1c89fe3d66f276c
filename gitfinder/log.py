"""Diagnostic logging to stderr."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
_PLAIN_FORMAT = "%(levelname)s %(message)s"


def configure_logging(level: str = "WARNING", stream: TextIO | None = None) -> logging.Logger:
    """Route the ``gitfinder`` logger to stderr.

    On a terminal diagnostics go through rich. Otherwise (pipes, files,
    CI logs) each record is written as exactly one plain line so it can be
    grepped alongside the CSV on stdout.
    """
    resolved = LOG_LEVELS.get(level.upper(), logging.WARNING)

    logger = logging.getLogger("gitfinder")
    logger.setLevel(resolved)
    logger.handlers.clear()

    console = Console(file=stream, stderr=stream is None)
    handler: logging.Handler
    if console.is_terminal:
        handler = RichHandler(console=console, show_time=False, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    handler.setLevel(resolved)
    logger.addHandler(handler)

    logger.propagate = False
    return logger
