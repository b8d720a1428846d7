"""consistent-trees merger trees.

consistent-trees writes its ``tree_*.dat`` forests to ``TreeDir`` and
annotates every halo in the per-snapshot halo catalogs with the ID of its
descendant (``DescID``).  Main branches are walked through that
annotation: the main progenitor of a halo is the most massive halo in the
previous snapshot whose ``DescID`` points at it.
"""

from __future__ import annotations

from pathlib import Path

from shellfish.core.global_config import GlobalConfig
from shellfish.core.protocols import HaloBackend
from shellfish.exceptions import BackendError

DESC_ID = "DescID"


class ConsistentTrees:
    """Concrete :class:`~shellfish.core.protocols.TreeBackend` for ``TreeType = consistent-trees``."""

    def __init__(self, gconfig: GlobalConfig) -> None:
        self._dir = Path(gconfig.tree_dir)
        if not gconfig.tree_dir or not self._dir.is_dir():
            raise BackendError(
                f"TreeDir '{gconfig.tree_dir}' is not an existing directory.",
            )
        self._progenitors: dict[int, dict[int, int]] = {}

    def tree_files(self) -> list[Path]:
        return sorted(self._dir.glob("*.dat"))

    def validate(self) -> None:
        """Require at least one tree file, each starting with a ``#`` header."""
        files = self.tree_files()
        if not files:
            raise BackendError(f"TreeDir '{self._dir}' contains no *.dat tree files.")
        for path in files:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    first = handle.readline()
            except OSError as exc:
                raise BackendError(
                    f"Could not read tree file '{path}': {exc.strerror or exc}",
                ) from exc
            except UnicodeDecodeError as exc:
                raise BackendError(
                    f"Tree file '{path}' is not valid UTF-8: {exc.reason} "
                    f"at byte {exc.start}",
                ) from exc
            if not first.startswith("#"):
                raise BackendError(
                    f"Tree file '{path}' does not start with a consistent-trees "
                    "header line.",
                )

    def main_branch(
        self,
        halos: HaloBackend,
        halo_id: int,
        snap: int,
        min_snap: int,
    ) -> list[tuple[int, int]]:
        if DESC_ID not in halos.names():
            raise BackendError(
                "Walking consistent-trees branches needs the DescID halo value.",
                hint="Add DescID to HaloValueNames and HaloValueColumns.",
            )
        branch = [(halo_id, snap)]
        current = halo_id
        for prev in range(snap - 1, min_snap - 1, -1):
            progenitor = self._main_progenitors(halos, prev).get(current)
            if progenitor is None:
                break
            branch.append((progenitor, prev))
            current = progenitor
        return branch

    def _main_progenitors(self, halos: HaloBackend, snap: int) -> dict[int, int]:
        """Map each descendant ID to its most massive progenitor in *snap*."""
        cached = self._progenitors.get(snap)
        if cached is not None:
            return cached

        cat = halos.read(snap, ("ID", DESC_ID, "M200m"))
        best: dict[int, tuple[float, int]] = {}
        for hid, desc, mass in zip(cat["ID"], cat[DESC_ID], cat["M200m"]):
            desc_id = int(desc)
            if desc_id < 0:
                continue
            if desc_id not in best or mass > best[desc_id][0]:
                best[desc_id] = (mass, int(hid))

        progenitors = {desc: hid for desc, (_, hid) in best.items()}
        self._progenitors[snap] = progenitors
        return progenitors


TREE_BACKENDS: dict[str, type[ConsistentTrees]] = {
    "consistent-trees": ConsistentTrees,
}
