"""The ``coord`` mode: attach halo coordinates to a list of halos.

Input columns:  ``ID Snapshot``; extra columns are ignored.
Output columns: ``ID Snapshot X Y Z R200m`` followed by any ``Values``.
"""

from __future__ import annotations

from dataclasses import dataclass

from shellfish.core.catalog import format_row, header, parse_catalog
from shellfish.core.config_file import option
from shellfish.core.environment import Environment
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError, StageError
from shellfish.modes.base import Mode
from shellfish.utils.values import parse_strs

COORD_VALUES: tuple[str, ...] = ("X", "Y", "Z", "R200m")


@dataclass(slots=True)
class CoordConfig:
    values: tuple[str, ...] = option(
        "Values", parse_strs, (),
        doc="Extra halo values (from HaloValueNames) appended after R200m.",
    )


class CoordMode(Mode):
    name = "coord"
    description = "Look up the position and radius of each input halo."
    config_type = CoordConfig

    def validate(self, gconfig: GlobalConfig) -> None:
        unknown = [v for v in self.config.values if v not in gconfig.halo_value_names]
        if unknown:
            raise ConfigError(
                f"Values {', '.join(unknown)} are not listed in HaloValueNames.",
            )

    def transform(
        self,
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        halos = env.require_halos()
        names = ("ID", *COORD_VALUES, *self.config.values)
        catalogs: dict[int, tuple[dict[int, int], dict[str, list[float]]]] = {}

        out = [header(("ID", "Snapshot", *names[1:]))]
        for row in parse_catalog(lines, 2):
            if row.snap not in catalogs:
                cat = halos.read(row.snap, names)
                index = {int(hid): i for i, hid in enumerate(cat["ID"])}
                catalogs[row.snap] = (index, cat)
            index, cat = catalogs[row.snap]
            i = index.get(row.id)
            if i is None:
                raise StageError(
                    f"Halo {row.id} is not in the halo catalog of snapshot {row.snap}.",
                )
            out.append(format_row(row.id, row.snap, (cat[name][i] for name in names[1:])))
        return out
