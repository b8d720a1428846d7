"""The ``id`` mode: pick the halos a pipeline will work on.

The id mode reads the halo catalog of one snapshot and selects halos
either by explicit ID or by an ``M200m`` range.  It takes no input from
stdin and starts every pipeline.

Output columns: ``ID Snapshot``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from shellfish.core.catalog import format_row, header
from shellfish.core.config_file import option
from shellfish.core.environment import Environment
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError, StageError
from shellfish.modes.base import Mode
from shellfish.utils.values import parse_float, parse_int, parse_ints, parse_str

ID_TYPES: tuple[str, ...] = ("ID", "M200m")
EXCLUSION_STRATEGIES: tuple[str, ...] = ("none", "subhalo")

_HALO_VALUES: tuple[str, ...] = ("ID", "X", "Y", "Z", "M200m", "R200m")


@dataclass(slots=True)
class IdConfig:
    id_type: str = option(
        "IDType", parse_str, "M200m",
        doc="How halos are selected: ID (explicit list) or M200m (mass range).",
    )
    ids: tuple[int, ...] = option(
        "IDs", parse_ints, (),
        doc="Halo IDs to select when IDType = ID.",
    )
    snap: int = option(
        "Snap", parse_int, -1,
        doc="Snapshot whose catalog is searched; -1 means SnapMax.",
    )
    mass_min: float = option(
        "MassMin", parse_float, 0.0,
        doc="Smallest M200m selected when IDType = M200m (inclusive).",
    )
    mass_max: float = option(
        "MassMax", parse_float, math.inf,
        doc="Largest M200m selected when IDType = M200m (exclusive).",
    )
    max_halos: int = option(
        "Max", parse_int, -1,
        doc="Keep at most this many halos, most massive first; -1 keeps all.",
    )
    exclusion_strategy: str = option(
        "ExclusionStrategy", parse_str, "none",
        doc=(
            "none keeps every selected halo. subhalo drops halos whose centre\n"
            "lies inside R200m of a more massive halo."
        ),
    )


class IdMode(Mode):
    name = "id"
    description = "Select halo IDs from a halo catalog by ID or by mass."
    reads_stdin = False
    config_type = IdConfig

    def validate(self, gconfig: GlobalConfig) -> None:
        cfg: IdConfig = self.config
        if cfg.id_type not in ID_TYPES:
            raise ConfigError(
                f"Unrecognized IDType '{cfg.id_type}' for the id mode.",
                hint=f"Valid values are: {', '.join(ID_TYPES)}.",
            )
        if cfg.exclusion_strategy not in EXCLUSION_STRATEGIES:
            raise ConfigError(
                f"Unrecognized ExclusionStrategy '{cfg.exclusion_strategy}' for "
                "the id mode.",
                hint=f"Valid values are: {', '.join(EXCLUSION_STRATEGIES)}.",
            )
        if cfg.id_type == "ID" and not cfg.ids:
            raise ConfigError("IDType = ID, but no IDs were given.")
        if cfg.id_type == "M200m" and not cfg.mass_min < cfg.mass_max:
            raise ConfigError(
                f"MassMin = {cfg.mass_min} must be smaller than "
                f"MassMax = {cfg.mass_max}.",
            )
        if cfg.snap >= 0 and not gconfig.snap_min <= cfg.snap <= gconfig.snap_max:
            raise ConfigError(
                f"Snap = {cfg.snap} is outside the snapshot range "
                f"[{gconfig.snap_min}, {gconfig.snap_max}].",
            )

    def transform(
        self,
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        cfg: IdConfig = self.config
        snap = cfg.snap if cfg.snap >= 0 else gconfig.snap_max
        cat = env.require_halos().read(snap, _HALO_VALUES)
        ids = [int(value) for value in cat["ID"]]
        masses = cat["M200m"]

        if cfg.id_type == "ID":
            index = {hid: i for i, hid in enumerate(ids)}
            missing = [hid for hid in cfg.ids if hid not in index]
            if missing:
                raise StageError(
                    f"The halo catalog of snapshot {snap} has no halos with "
                    f"IDs {', '.join(map(str, missing))}.",
                )
            selected = [index[hid] for hid in cfg.ids]
        else:
            selected = [
                i for i, mass in enumerate(masses)
                if cfg.mass_min <= mass < cfg.mass_max
            ]
            selected.sort(key=lambda i: masses[i], reverse=True)

        if cfg.exclusion_strategy == "subhalo":
            selected = [i for i in selected if not _is_subhalo(i, cat)]
        if cfg.max_halos >= 0:
            selected = selected[: cfg.max_halos]

        return [header(("ID", "Snapshot")), *(format_row(ids[i], snap) for i in selected)]


def _is_subhalo(i: int, cat: dict[str, list[float]]) -> bool:
    """Whether halo *i* sits inside R200m of any more massive halo.

    R200m must be in the same units as X, Y and Z.
    """
    xs, ys, zs = cat["X"], cat["Y"], cat["Z"]
    masses, radii = cat["M200m"], cat["R200m"]
    for j, mass in enumerate(masses):
        if mass <= masses[i]:
            continue
        dist2 = (xs[i] - xs[j]) ** 2 + (ys[i] - ys[j]) ** 2 + (zs[i] - zs[j]) ** 2
        if dist2 < radii[j] ** 2:
            return True
    return False
