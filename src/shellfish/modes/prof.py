"""The ``prof`` mode: radial profiles around halo centres.

Input columns:  ``ID Snapshot X Y Z R200m`` (the output of ``coord``).
Output columns: ``ID Snapshot Radii Profile``.
"""

from __future__ import annotations

from dataclasses import dataclass

from shellfish.core.config_file import option
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError
from shellfish.modes.base import KernelMode
from shellfish.utils.values import parse_float, parse_int, parse_str

PROFILE_TYPES: tuple[str, ...] = ("density", "mass")


@dataclass(slots=True)
class ProfConfig:
    profile_type: str = option(
        "ProfileType", parse_str, "density",
        doc="Profile to measure: density or mass.",
    )
    bins: int = option(
        "Bins", parse_int, 150,
        doc="Number of logarithmic radial bins.",
    )
    r_min_mult: float = option(
        "RMinMult", parse_float, 0.03,
        doc="Inner edge of the profile in units of R200m.",
    )
    r_max_mult: float = option(
        "RMaxMult", parse_float, 3.0,
        doc="Outer edge of the profile in units of R200m.",
    )


class ProfMode(KernelMode):
    name = "prof"
    description = "Measure radial profiles of the particles around each halo."
    config_type = ProfConfig
    min_columns = 6
    output_columns = ("ID", "Snapshot", "Radii", "Profile")

    def validate(self, gconfig: GlobalConfig) -> None:
        cfg: ProfConfig = self.config
        if cfg.profile_type not in PROFILE_TYPES:
            raise ConfigError(
                f"Unrecognized ProfileType '{cfg.profile_type}' for the prof mode.",
                hint=f"Valid values are: {', '.join(PROFILE_TYPES)}.",
            )
        if cfg.bins <= 0:
            raise ConfigError(f"Bins = {cfg.bins} must be positive.")
        if not 0 < cfg.r_min_mult < cfg.r_max_mult:
            raise ConfigError(
                f"Need 0 < RMinMult < RMaxMult, got RMinMult = {cfg.r_min_mult} "
                f"and RMaxMult = {cfg.r_max_mult}.",
            )
