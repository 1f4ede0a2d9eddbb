"""Logging setup shared by the CLI and the API server."""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route all package logs through rich. Safe to call more than once."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s - %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
