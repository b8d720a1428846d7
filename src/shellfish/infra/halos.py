"""Text halo catalogs: one whitespace-separated file per snapshot.

``HaloDir`` holds one catalog per snapshot (e.g. Rockstar/consistent-trees
``hlist_*.list`` files).  Sorted by file name, the ``i``-th catalog
belongs to snapshot ``SnapMin + i``.  Which columns hold which values is
declared in the global config::

    HaloValueNames   = ID, DescID, X, Y, Z, M200m, R200m
    HaloValueColumns = 1, 3, 17, 18, 19, 10, 11

Lines starting with ``#`` are comments.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import ClassVar

from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import BackendError
from shellfish.utils.log import get_logger

log = get_logger(__name__)


class TextHaloCatalogs:
    """Concrete :class:`~shellfish.core.protocols.HaloBackend` for ``HaloType = Text``."""

    REQUIRED_NAMES: ClassVar[tuple[str, ...]] = ("ID", "X", "Y", "Z", "M200m", "R200m")

    def __init__(self, gconfig: GlobalConfig) -> None:
        self._dir = Path(gconfig.halo_dir)
        self._snap_min = gconfig.snap_min
        self._snap_max = gconfig.snap_max
        self._columns: dict[str, int] = dict(
            zip(gconfig.halo_value_names, gconfig.halo_value_columns),
        )

        if not gconfig.halo_dir or not self._dir.is_dir():
            raise BackendError(
                f"HaloDir '{gconfig.halo_dir}' is not an existing directory.",
            )
        missing = [name for name in self.REQUIRED_NAMES if name not in self._columns]
        if missing:
            raise BackendError(
                "Text halo catalogs need the values "
                f"{', '.join(self.REQUIRED_NAMES)}, but HaloValueNames is "
                f"missing {', '.join(missing)}.",
            )
        self._files: list[Path] = sorted(
            path
            for path in self._dir.iterdir()
            if path.is_file() and not path.name.startswith(".")
        )
        if not self._files:
            raise BackendError(f"HaloDir '{self._dir}' contains no halo catalogs.")

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def names(self) -> tuple[str, ...]:
        return tuple(self._columns)

    def validate(self) -> None:
        """Check that there is exactly one catalog per snapshot."""
        expected = self._snap_max - self._snap_min + 1
        if len(self._files) != expected:
            raise BackendError(
                f"HaloDir '{self._dir}' contains {len(self._files)} catalogs, "
                f"but SnapMin = {self._snap_min} and SnapMax = {self._snap_max} "
                f"require {expected}.",
            )

    def catalog_path(self, snap: int) -> Path:
        index = snap - self._snap_min
        if snap > self._snap_max or index < 0 or index >= len(self._files):
            raise BackendError(
                f"No halo catalog for snapshot {snap} in '{self._dir}'.",
            )
        return self._files[index]

    def read(self, snap: int, names: Sequence[str]) -> dict[str, list[float]]:
        """Read the columns *names* of the catalog for *snap*."""
        unknown = [name for name in names if name not in self._columns]
        if unknown:
            raise BackendError(
                f"The halo catalogs do not provide {', '.join(unknown)}.",
                hint="Add them to HaloValueNames and HaloValueColumns.",
            )
        columns = [self._columns[name] for name in names]
        path = self.catalog_path(snap)
        values: dict[str, list[float]] = {name: [] for name in names}

        log.debug("reading %s from %s", ", ".join(names), path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                for line_num, line in enumerate(handle, start=1):
                    text = line.strip()
                    if not text or text.startswith("#"):
                        continue
                    tokens = text.split()
                    try:
                        row = [float(tokens[col]) for col in columns]
                    except (IndexError, ValueError) as exc:
                        raise BackendError(
                            f"Could not parse line {line_num} of halo catalog "
                            f"'{path}': {exc}",
                        ) from exc
                    for name, value in zip(names, row):
                        values[name].append(value)
        except OSError as exc:
            raise BackendError(
                f"Could not read halo catalog '{path}': {exc.strerror or exc}",
            ) from exc
        except UnicodeDecodeError as exc:
            raise BackendError(
                f"Halo catalog '{path}' is not valid UTF-8: {exc.reason} "
                f"at byte {exc.start}",
            ) from exc
        return values


HALO_BACKENDS: dict[str, type[TextHaloCatalogs]] = {
    "Text": TextHaloCatalogs,
}
