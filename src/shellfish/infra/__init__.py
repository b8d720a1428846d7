"""Infrastructure layer: readers for data on disk.

This layer wraps all interaction with snapshot files, halo catalogs and
merger trees.  Every raw ``OSError`` or parse error must be caught here
and re-raised as a :class:`~shellfish.exceptions.BackendError`.

Rules
-----
* No imports from ``cli`` or ``modes``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must satisfy the protocols in :mod:`shellfish.core.protocols`.
"""

from shellfish.infra.halos import HALO_BACKENDS, TextHaloCatalogs
from shellfish.infra.snapshots import (
    SNAPSHOT_BACKENDS,
    ArtioSnapshots,
    GotetraSnapshots,
    LGadget2Snapshots,
)
from shellfish.infra.trees import TREE_BACKENDS, ConsistentTrees

__all__: list[str] = [
    "HALO_BACKENDS",
    "SNAPSHOT_BACKENDS",
    "TREE_BACKENDS",
    "ArtioSnapshots",
    "ConsistentTrees",
    "GotetraSnapshots",
    "LGadget2Snapshots",
    "TextHaloCatalogs",
]
