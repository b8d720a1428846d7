"""Small value objects shared across the core layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Invocation:
    """A classified command line."""

    program: str
    """``argv[0]``."""

    mode: str
    """Name of the requested stage."""

    flags: tuple[str, ...]
    """Tokens between the mode name and the trailing config files."""

    config_files: tuple[str, ...]
    """The trailing ``.config`` tokens, in command-line order."""

    @property
    def config_count(self) -> int:
        return len(self.config_files)


class Phase(enum.Enum):
    """Lifecycle of one invocation.

    Transitions only move forward; any failure jumps to ``FAILED``.
    """

    START = "start"
    CLASSIFIED = "classified"
    CONFIG_RESOLVED = "config-resolved"
    MEMO_VALIDATED = "memo-validated"
    BACKEND_READY = "backend-ready"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MemoStatus(enum.Enum):
    """Outcome of a memoization-directory check."""

    SEEDED = "seeded"
    VALIDATED = "validated"


@dataclass(frozen=True, slots=True)
class CatalogRow:
    """One data line of a catalog: halo ID, snapshot, then extra columns."""

    id: int
    snap: int
    values: tuple[float, ...] = ()
