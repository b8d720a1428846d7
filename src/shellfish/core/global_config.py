"""The global configuration shared by every stage of a pipeline.

A :class:`GlobalConfig` describes where the simulation data lives and how
to read it: snapshot file layout, halo catalogs, merger trees, units and
the memoization directory.  It is loaded from the ``[config]`` section of
a ``.config`` file and validated eagerly, so every later phase can trust
its values.

Only a declared subset of fields, :data:`CACHE_FIELDS`, decides whether a
memoization directory may be reused.  Fields that only steer runtime
behaviour (``Threads``, ``ValidateFormats``) and ``MemoDir`` itself are
deliberately left out.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from shellfish.core.config_file import (
    config_fields,
    option,
    parse_values,
    read_section,
    render_example,
)
from shellfish.exceptions import ConfigError
from shellfish.utils.values import (
    parse_bool,
    parse_int,
    parse_ints,
    parse_str,
    parse_strs,
)

SECTION = "config"

SNAPSHOT_TYPES: tuple[str, ...] = ("gotetra", "LGadget-2", "ARTIO")
HALO_TYPES: tuple[str, ...] = ("Text", "nil")
TREE_TYPES: tuple[str, ...] = ("consistent-trees", "nil")
ENDIANNESSES: tuple[str, ...] = ("SystemOrder", "LittleEndian", "BigEndian")
POSITION_UNITS: tuple[str, ...] = ("Mpc/h", "kpc/h")
MASS_UNITS: tuple[str, ...] = ("Msun/h",)
FORMAT_MEANINGS: tuple[str, ...] = ("Snapshot", "Block", "ScaleFactor")

NIL = "nil"

# printf verbs in SnapshotFormat; "%%" is a literal percent sign.
_VERB_RE = re.compile(r"%(?:%|[-+ #0]*\d*(?:\.\d+)?[diouxXeEfFgGs])")


@dataclass(frozen=True, slots=True)
class GlobalConfig:
    """Validated contents of a global ``.config`` file."""

    version: str = option(
        "Version", parse_str, "1.0.0",
        doc="Version of the config file format.",
    )
    snapshot_format: str = option(
        "SnapshotFormat", parse_str, "",
        doc=(
            "printf-style pattern for snapshot file names, e.g.\n"
            "path/to/snapdir_%03d/snapshot_%03d.%d"
        ),
    )
    snapshot_type: str = option(
        "SnapshotType", parse_str, "LGadget-2",
        doc="Snapshot file format: gotetra, LGadget-2 or ARTIO.",
    )
    snapshot_format_meanings: tuple[str, ...] = option(
        "SnapshotFormatMeanings", parse_strs, (),
        doc=(
            "What each verb of SnapshotFormat stands for: Snapshot, Block\n"
            "or ScaleFactor."
        ),
    )
    scale_factor_file: str = option(
        "ScaleFactorFile", parse_str, "",
        doc="File listing one scale factor per snapshot, used by ScaleFactor verbs.",
    )
    block_mins: tuple[int, ...] = option(
        "BlockMins", parse_ints, (),
        doc="Smallest block index along each Block axis.",
    )
    block_maxes: tuple[int, ...] = option(
        "BlockMaxes", parse_ints, (),
        doc="Largest block index along each Block axis (inclusive).",
    )
    snap_min: int = option(
        "SnapMin", parse_int, 0,
        doc="Index of the first snapshot.",
    )
    snap_max: int = option(
        "SnapMax", parse_int, 0,
        doc="Index of the last snapshot (inclusive).",
    )
    halo_dir: str = option(
        "HaloDir", parse_str, "",
        doc="Directory holding one halo catalog per snapshot.",
    )
    halo_type: str = option(
        "HaloType", parse_str, NIL,
        doc="Halo catalog format: Text or nil.",
    )
    tree_dir: str = option(
        "TreeDir", parse_str, "",
        doc="Directory holding the merger tree files.",
    )
    tree_type: str = option(
        "TreeType", parse_str, NIL,
        doc="Merger tree format: consistent-trees or nil.",
    )
    halo_position_units: str = option(
        "HaloPositionUnits", parse_str, "Mpc/h",
        doc="Units of halo positions and radii: Mpc/h or kpc/h.",
    )
    halo_mass_units: str = option(
        "HaloMassUnits", parse_str, "Msun/h",
        doc="Units of halo masses: Msun/h.",
    )
    halo_value_names: tuple[str, ...] = option(
        "HaloValueNames", parse_strs, (),
        doc="Names of the halo catalog columns to read.",
    )
    halo_value_columns: tuple[int, ...] = option(
        "HaloValueColumns", parse_ints, (),
        doc="Zero-indexed catalog column of each entry in HaloValueNames.",
    )
    memo_dir: str = option(
        "MemoDir", parse_str, "",
        doc="Directory where intermediate results are memoized. Required.",
    )
    endianness: str = option(
        "Endianness", parse_str, "SystemOrder",
        doc="Byte order of binary snapshots: SystemOrder, LittleEndian or BigEndian.",
    )
    validate_formats: bool = option(
        "ValidateFormats", parse_bool, False,
        doc="Check the on-disk layout of every backend before running.",
    )
    threads: int = option(
        "Threads", parse_int, -1,
        doc="Worker threads for numerical kernels; -1 uses every core.",
    )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: str | Path) -> GlobalConfig:
        """Load and validate the ``[config]`` section of *path*.

        Raises
        ------
        ConfigError
            If the file is unreadable, malformed, or fails validation.
        """
        path = Path(path)
        raw = read_section(path, SECTION)
        config = cls(**parse_values(cls, raw, source=f"config file '{path}'"))
        config.validate(source=str(path))
        return config

    def validate(self, *, source: str = "global config") -> None:
        """Check cross-field consistency; raise :class:`ConfigError` on failure."""
        _check_choice(source, "SnapshotType", self.snapshot_type, SNAPSHOT_TYPES)
        _check_choice(source, "HaloType", self.halo_type, HALO_TYPES)
        _check_choice(source, "TreeType", self.tree_type, TREE_TYPES)
        _check_choice(source, "Endianness", self.endianness, ENDIANNESSES)
        _check_choice(
            source, "HaloPositionUnits", self.halo_position_units, POSITION_UNITS,
        )
        _check_choice(source, "HaloMassUnits", self.halo_mass_units, MASS_UNITS)
        for meaning in self.snapshot_format_meanings:
            _check_choice(source, "SnapshotFormatMeanings", meaning, FORMAT_MEANINGS)

        if not self.memo_dir:
            raise ConfigError(
                f"MemoDir is not set in {source}.",
                hint="Point MemoDir at an existing directory for memoized results.",
            )
        if self.snap_min > self.snap_max:
            raise ConfigError(
                f"SnapMin = {self.snap_min} is larger than "
                f"SnapMax = {self.snap_max} in {source}.",
            )

        if len(self.block_mins) != len(self.block_maxes):
            raise ConfigError(
                f"BlockMins has {len(self.block_mins)} entries but BlockMaxes "
                f"has {len(self.block_maxes)} in {source}.",
            )
        for axis, (lo, hi) in enumerate(zip(self.block_mins, self.block_maxes)):
            if lo > hi:
                raise ConfigError(
                    f"Block axis {axis} has BlockMins = {lo} larger than "
                    f"BlockMaxes = {hi} in {source}.",
                )

        if len(self.halo_value_names) != len(self.halo_value_columns):
            raise ConfigError(
                f"HaloValueNames has {len(self.halo_value_names)} entries but "
                f"HaloValueColumns has {len(self.halo_value_columns)} in {source}.",
            )
        if any(col < 0 for col in self.halo_value_columns):
            raise ConfigError(f"HaloValueColumns must be non-negative in {source}.")
        if len(set(self.halo_value_names)) != len(self.halo_value_names):
            raise ConfigError(f"HaloValueNames contains duplicates in {source}.")

        self._validate_snapshot_format(source)

    def _validate_snapshot_format(self, source: str) -> None:
        if not self.snapshot_format:
            return
        n_verbs = len(snapshot_format_verbs(self.snapshot_format))
        meanings = self.snapshot_format_meanings
        if n_verbs != len(meanings):
            raise ConfigError(
                f"SnapshotFormat '{self.snapshot_format}' has {n_verbs} format "
                f"verbs, but SnapshotFormatMeanings has {len(meanings)} entries "
                f"in {source}.",
            )
        n_blocks = meanings.count("Block")
        if n_blocks != len(self.block_mins):
            raise ConfigError(
                f"SnapshotFormatMeanings has {n_blocks} Block entries, but "
                f"{len(self.block_mins)} block ranges are given in {source}.",
            )
        if "ScaleFactor" in meanings and not self.scale_factor_file:
            raise ConfigError(
                f"SnapshotFormatMeanings uses ScaleFactor, but ScaleFactorFile "
                f"is not set in {source}.",
            )

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def example_config(self) -> str:
        """Return a documented global config file."""
        return render_example(
            self,
            SECTION,
            title=(
                "Example global config file for Shellfish.\n"
                "Pass it as the first .config argument or point\n"
                "$SHELLFISH_GLOBAL_CONFIG at it."
            ),
        )


# ---------------------------------------------------------------------------
# Cache-relevant equality
# ---------------------------------------------------------------------------

CACHE_FIELDS: tuple[str, ...] = (
    "version",
    "snapshot_format",
    "snapshot_type",
    "halo_dir",
    "halo_type",
    "tree_dir",
    "block_mins",
    "block_maxes",
    "snap_min",
    "snap_max",
    "snapshot_format_meanings",
    "halo_position_units",
    "halo_mass_units",
    "halo_value_columns",
    "halo_value_names",
    "endianness",
)
"""Fields that change the content of memoized data.

Changing anything else (thread count, format validation, tree type,
scale factor file location) must not invalidate a memoization directory.
"""


def cache_differences(a: GlobalConfig, b: GlobalConfig) -> list[str]:
    """Return the file keys of the cache-relevant fields where *a* and *b* differ."""
    keys = {f.name: f.metadata["key"] for f in config_fields(GlobalConfig)}
    return [keys[name] for name in CACHE_FIELDS if getattr(a, name) != getattr(b, name)]


def snapshot_format_verbs(fmt: str) -> list[str]:
    """Return the printf verbs in *fmt*, excluding literal ``%%``."""
    return [verb for verb in _VERB_RE.findall(fmt) if verb != "%%"]


def _check_choice(source: str, key: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigError(
            f"Unrecognized {key} '{value}' in {source}.",
            hint=f"Valid values are: {', '.join(choices)}.",
        )
