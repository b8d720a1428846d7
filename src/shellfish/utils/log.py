"""Logging helpers: one ``shellfish`` logger tree rendered by Rich on stderr.

stdout carries catalog lines between pipeline stages, so every
diagnostic goes to stderr.  The level defaults to ``WARNING`` so a quiet
pipeline stays quiet; ``SHELLFISH_LOG_LEVEL=DEBUG`` traces each phase of
an invocation.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "shellfish"
LEVEL_ENV_VAR = "SHELLFISH_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv(LEVEL_ENV_VAR, DEFAULT_LEVEL)
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    # getLevelName returns "Level X" for unknown names.
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Configure the base ``shellfish`` logger once and return it.

    Repeated calls only adjust the level, so tests and the CLI can both
    call this without stacking handlers.
    """
    base = logging.getLogger(ROOT_LOGGER)
    base.setLevel(_resolve_level(level))
    if base.handlers:
        return base

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    base.addHandler(handler)
    base.propagate = False
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under ``shellfish``."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
