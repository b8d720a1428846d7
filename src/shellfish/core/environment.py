"""Per-invocation environment handle.

One :class:`Environment` is built by the dispatcher after the memoization
guard has passed, filled in by the backend initializer, and passed by
reference to the mode.  It is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shellfish.core.protocols import HaloBackend, SnapshotBackend, TreeBackend
from shellfish.exceptions import StageError


@dataclass(slots=True)
class Environment:
    """The memoization directory plus the activated backends."""

    memo_dir: Path
    snapshots: SnapshotBackend | None = None
    halos: HaloBackend | None = None
    trees: TreeBackend | None = None

    def require_halos(self) -> HaloBackend:
        if self.halos is None:
            raise StageError(
                "This mode needs halo catalogs, but no halo backend is active.",
                hint="Set HaloType in the global config.",
            )
        return self.halos

    def require_trees(self) -> TreeBackend:
        if self.trees is None:
            raise StageError(
                "This mode needs merger trees, but no tree backend is active.",
                hint="Set TreeType in the global config.",
            )
        return self.trees
