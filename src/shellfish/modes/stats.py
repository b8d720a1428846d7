"""The ``stats`` mode: summary quantities of fitted shells.

Input columns:  ``ID Snapshot Coefficients...`` (the output of ``shell``).
Output columns: ``ID Snapshot`` followed by the requested ``Values``.
"""

from __future__ import annotations

from dataclasses import dataclass

from shellfish.core.config_file import option
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError
from shellfish.modes.base import KernelMode
from shellfish.utils.values import parse_int, parse_strs

STAT_VALUES: tuple[str, ...] = ("R", "M", "V", "Area")


@dataclass(slots=True)
class StatsConfig:
    values: tuple[str, ...] = option(
        "Values", parse_strs, ("R", "M"),
        doc="Quantities to report for each shell: R, M, V, Area.",
    )
    samples: int = option(
        "Samples", parse_int, 10000,
        doc="Monte Carlo samples used to integrate over each shell.",
    )


class StatsMode(KernelMode):
    name = "stats"
    description = "Compute radii, masses and volumes of fitted shells."
    config_type = StatsConfig
    min_columns = 3

    @property
    def output_columns(self) -> tuple[str, ...]:  # type: ignore[override]
        return ("ID", "Snapshot", *self.config.values)

    def validate(self, gconfig: GlobalConfig) -> None:
        cfg: StatsConfig = self.config
        unknown = [value for value in cfg.values if value not in STAT_VALUES]
        if unknown:
            raise ConfigError(
                f"Unrecognized Values {', '.join(unknown)} for the stats mode.",
                hint=f"Valid values are: {', '.join(STAT_VALUES)}.",
            )
        if not cfg.values:
            raise ConfigError("The stats mode needs at least one entry in Values.")
        if cfg.samples <= 0:
            raise ConfigError(f"Samples = {cfg.samples} must be positive.")
