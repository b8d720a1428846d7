"""Protocols (interfaces) consumed by the core layer and the modes.

These define the contracts that infrastructure backends must satisfy.
Modes depend only on these protocols, never on concrete reader
classes, so a stage can be exercised against an in-memory fake.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from shellfish.core.models import CatalogRow

if TYPE_CHECKING:
    from shellfish.core.environment import Environment
    from shellfish.core.global_config import GlobalConfig


class SnapshotBackend(Protocol):
    """Contract for particle-snapshot readers."""

    def paths(self, snap: int) -> list[Path]:
        """Return every file that makes up snapshot *snap*."""
        ...  # pragma: no cover

    def validate(self) -> None:
        """Check the on-disk layout of every snapshot.

        Raises
        ------
        BackendError
            When a file is missing or its header does not match the
            configured format.
        """
        ...  # pragma: no cover


class HaloBackend(Protocol):
    """Contract for halo-catalog readers."""

    def names(self) -> tuple[str, ...]:
        """Return the value names this catalog can provide."""
        ...  # pragma: no cover

    def read(self, snap: int, names: Sequence[str]) -> dict[str, list[float]]:
        """Return the requested columns of the catalog for *snap*.

        Every list has one entry per halo, in catalog order.

        Raises
        ------
        BackendError
            When the catalog cannot be read or a name is not provided.
        """
        ...  # pragma: no cover

    def validate(self) -> None:
        ...  # pragma: no cover


class TreeBackend(Protocol):
    """Contract for merger-tree readers."""

    def main_branch(
        self,
        halos: HaloBackend,
        halo_id: int,
        snap: int,
        min_snap: int,
    ) -> list[tuple[int, int]]:
        """Return ``(id, snap)`` pairs of the main progenitor branch.

        The list starts with ``(halo_id, snap)`` and walks backwards in
        time, stopping at *min_snap* or when the branch ends.
        """
        ...  # pragma: no cover

    def validate(self) -> None:
        ...  # pragma: no cover


class Kernel(Protocol):
    """Contract for the numerical computation behind a stage.

    Shell fitting, density profiles and shell statistics are supplied as
    kernels.  A kernel receives the validated mode config, the global
    config, the environment and the parsed input rows, and returns the
    output catalog lines (without the column header).
    """

    def __call__(
        self,
        config: Any,
        gconfig: GlobalConfig,
        env: Environment,
        rows: list[CatalogRow],
    ) -> list[str]:
        ...  # pragma: no cover
