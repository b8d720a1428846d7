"""The ``shell`` mode: fit splashback shells around halos.

Input columns:  ``ID Snapshot X Y Z R200m`` (the output of ``coord``).
Output columns: ``ID Snapshot Coefficients``, the shape coefficients of
each fitted shell.
"""

from __future__ import annotations

from dataclasses import dataclass

from shellfish.core.config_file import option
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError
from shellfish.modes.base import KernelMode
from shellfish.utils.values import parse_float, parse_int


@dataclass(slots=True)
class ShellConfig:
    los: int = option(
        "Los", parse_int, 1000,
        doc="Number of lines of sight per halo.",
    )
    rings: int = option(
        "Rings", parse_int, 10,
        doc="Number of rings the lines of sight are arranged in.",
    )
    order: int = option(
        "Order", parse_int, 3,
        doc="Order of the shell's shape function.",
    )
    subsample_length: int = option(
        "SubsampleLength", parse_int, 1,
        doc="Use one particle out of every SubsampleLength^3.",
    )
    r_min_mult: float = option(
        "RMinMult", parse_float, 0.5,
        doc="Innermost radius searched for the splashback edge, in units of R200m.",
    )
    r_max_mult: float = option(
        "RMaxMult", parse_float, 3.0,
        doc="Outermost radius searched for the splashback edge, in units of R200m.",
    )


class ShellMode(KernelMode):
    name = "shell"
    description = "Fit a splashback shell around each input halo."
    config_type = ShellConfig
    min_columns = 6
    output_columns = ("ID", "Snapshot", "Coefficients")

    def validate(self, gconfig: GlobalConfig) -> None:
        cfg: ShellConfig = self.config
        for key, value in (
            ("Los", cfg.los),
            ("Rings", cfg.rings),
            ("Order", cfg.order),
            ("SubsampleLength", cfg.subsample_length),
        ):
            if value <= 0:
                raise ConfigError(f"{key} = {value} must be positive.")
        if not 0 < cfg.r_min_mult < cfg.r_max_mult:
            raise ConfigError(
                f"Need 0 < RMinMult < RMaxMult, got RMinMult = {cfg.r_min_mult} "
                f"and RMaxMult = {cfg.r_max_mult}.",
            )
