"""Particle-snapshot backends: locating and sanity-checking snapshot files.

Decoding particles is the job of the numerical kernels; this module only
knows where each snapshot lives on disk and whether the files look like
the configured format.  File names come from ``SnapshotFormat``, a
printf-style pattern whose verbs are filled according to
``SnapshotFormatMeanings``::

    SnapshotFormat = sims/snapdir_%03d/snapshot_%03d.%d
    SnapshotFormatMeanings = Snapshot, Snapshot, Block
    BlockMins = 0
    BlockMaxes = 7

All ``OSError``s are re-raised as :class:`~shellfish.exceptions.BackendError`.
"""

from __future__ import annotations

import itertools
import struct
import sys
from pathlib import Path
from typing import Any, ClassVar

from shellfish.core.global_config import GlobalConfig, snapshot_format_verbs
from shellfish.exceptions import BackendError

_FLOAT_VERBS = frozenset("eEfFgG")


def byte_order_prefix(endianness: str) -> str:
    """Map an ``Endianness`` config value to a :mod:`struct` prefix."""
    if endianness == "LittleEndian":
        return "<"
    if endianness == "BigEndian":
        return ">"
    return "<" if sys.byteorder == "little" else ">"


class SnapshotFiles:
    """Shared file-layout logic for every snapshot backend.

    Subclasses only differ in :meth:`_check_header`.
    """

    type_name: ClassVar[str] = ""

    def __init__(self, gconfig: GlobalConfig) -> None:
        self._format: str = gconfig.snapshot_format
        self._meanings: tuple[str, ...] = gconfig.snapshot_format_meanings
        self._verbs: list[str] = snapshot_format_verbs(gconfig.snapshot_format)
        self._block_ranges: list[range] = [
            range(lo, hi + 1)
            for lo, hi in zip(gconfig.block_mins, gconfig.block_maxes)
        ]
        self._snap_min: int = gconfig.snap_min
        self._snap_max: int = gconfig.snap_max
        self._scale_factor_file: str = gconfig.scale_factor_file
        self._scale_factors: list[str] | None = None
        self.byte_order: str = byte_order_prefix(gconfig.endianness)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def paths(self, snap: int) -> list[Path]:
        """Return every block file of snapshot *snap*, in block order."""
        if not self._format:
            raise BackendError(
                f"SnapshotFormat is not set, so the {self.type_name} backend "
                "cannot locate snapshot files.",
            )
        if not self._snap_min <= snap <= self._snap_max:
            raise BackendError(
                f"Snapshot {snap} is outside the range "
                f"[{self._snap_min}, {self._snap_max}].",
            )
        return [
            Path(self._expand(snap, blocks))
            for blocks in itertools.product(*self._block_ranges)
        ]

    def validate(self) -> None:
        """Check that every file of every snapshot exists and has a sane header."""
        for snap in range(self._snap_min, self._snap_max + 1):
            for path in self.paths(snap):
                if not path.is_file():
                    raise BackendError(
                        f"{self.type_name} snapshot file '{path}' for snapshot "
                        f"{snap} does not exist.",
                        hint="Check SnapshotFormat, BlockMins/BlockMaxes and "
                        "SnapMin/SnapMax.",
                    )
                try:
                    self._check_header(path)
                except OSError as exc:
                    raise BackendError(
                        f"Could not read {self.type_name} snapshot file "
                        f"'{path}': {exc.strerror or exc}",
                    ) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_header(self, path: Path) -> None:
        if path.stat().st_size == 0:
            raise BackendError(f"{self.type_name} snapshot file '{path}' is empty.")

    def _expand(self, snap: int, blocks: tuple[int, ...]) -> str:
        args: list[Any] = []
        block_iter = iter(blocks)
        for verb, meaning in zip(self._verbs, self._meanings):
            if meaning == "Snapshot":
                value: Any = snap
            elif meaning == "Block":
                value = next(block_iter)
            else:
                value = self._scale_factor(snap)
            args.append(_coerce(verb, value))
        try:
            return self._format % tuple(args)
        except (TypeError, ValueError) as exc:
            raise BackendError(
                f"Could not expand SnapshotFormat '{self._format}' for "
                f"snapshot {snap}: {exc}",
            ) from exc

    def _scale_factor(self, snap: int) -> str:
        if self._scale_factors is None:
            path = Path(self._scale_factor_file)
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise BackendError(
                    f"Could not read ScaleFactorFile '{path}': "
                    f"{exc.strerror or exc}",
                ) from exc
            except UnicodeDecodeError as exc:
                raise BackendError(
                    f"ScaleFactorFile '{path}' is not valid UTF-8: "
                    f"{exc.reason} at byte {exc.start}",
                ) from exc
            self._scale_factors = [
                line.strip()
                for line in text.splitlines()
                if line.strip() and not line.lstrip().startswith("#")
            ]
        index = snap - self._snap_min
        if index >= len(self._scale_factors):
            raise BackendError(
                f"ScaleFactorFile '{self._scale_factor_file}' lists "
                f"{len(self._scale_factors)} scale factors, but snapshot "
                f"{snap} needs entry {index}.",
            )
        return self._scale_factors[index]


def _coerce(verb: str, value: Any) -> Any:
    """Convert *value* to the Python type the printf *verb* expects."""
    kind = verb[-1]
    if kind == "s":
        return str(value)
    try:
        if kind in _FLOAT_VERBS:
            return float(value)
        return int(value)
    except ValueError as exc:
        raise BackendError(
            f"Value '{value}' does not fit the SnapshotFormat verb '{verb}'.",
        ) from exc


class GotetraSnapshots(SnapshotFiles):
    """Snapshots written by gotetra."""

    type_name = "gotetra"


class ArtioSnapshots(SnapshotFiles):
    """Snapshots written in the ARTIO format."""

    type_name = "ARTIO"


class LGadget2Snapshots(SnapshotFiles):
    """Snapshots written by L-Gadget2.

    Every file starts with the Fortran record marker of the 256-byte
    Gadget-2 header, which also reveals a wrong ``Endianness``.
    """

    type_name = "LGadget-2"

    HEADER_SIZE: ClassVar[int] = 256

    def _check_header(self, path: Path) -> None:
        with path.open("rb") as handle:
            raw = handle.read(4)
        if len(raw) < 4:
            raise BackendError(f"LGadget-2 snapshot file '{path}' is truncated.")
        (marker,) = struct.unpack(f"{self.byte_order}i", raw)
        if marker != self.HEADER_SIZE:
            raise BackendError(
                f"LGadget-2 snapshot file '{path}' starts with record marker "
                f"{marker}, expected {self.HEADER_SIZE}.",
                hint="The file is not an LGadget-2 snapshot, or Endianness is wrong.",
            )


SNAPSHOT_BACKENDS: dict[str, type[SnapshotFiles]] = {
    "gotetra": GotetraSnapshots,
    "LGadget-2": LGadget2Snapshots,
    "ARTIO": ArtioSnapshots,
}
