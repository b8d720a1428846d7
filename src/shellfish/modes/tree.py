"""The ``tree`` mode: expand halos into their main progenitor branches.

Input columns:  ``ID Snapshot``.
Output columns: ``ID Snapshot``, one line per branch member, each branch
starting with the input halo and walking back in time.
"""

from __future__ import annotations

from dataclasses import dataclass

from shellfish.core.catalog import format_row, header, parse_catalog
from shellfish.core.config_file import option
from shellfish.core.environment import Environment
from shellfish.core.global_config import GlobalConfig
from shellfish.exceptions import ConfigError, StageError
from shellfish.modes.base import Mode
from shellfish.utils.values import parse_int


@dataclass(slots=True)
class TreeConfig:
    min_snap: int = option(
        "MinSnap", parse_int, -1,
        doc="Earliest snapshot a branch is followed to; -1 means SnapMin.",
    )


class TreeMode(Mode):
    name = "tree"
    description = "Follow each input halo back along its main progenitor branch."
    config_type = TreeConfig

    def validate(self, gconfig: GlobalConfig) -> None:
        cfg: TreeConfig = self.config
        if cfg.min_snap >= 0 and not gconfig.snap_min <= cfg.min_snap <= gconfig.snap_max:
            raise ConfigError(
                f"MinSnap = {cfg.min_snap} is outside the snapshot range "
                f"[{gconfig.snap_min}, {gconfig.snap_max}].",
            )

    def transform(
        self,
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        cfg: TreeConfig = self.config
        halos = env.require_halos()
        trees = env.require_trees()
        min_snap = cfg.min_snap if cfg.min_snap >= 0 else gconfig.snap_min

        out = [header(("ID", "Snapshot"))]
        for row in parse_catalog(lines, 2):
            if row.snap < min_snap:
                raise StageError(
                    f"Halo {row.id} is in snapshot {row.snap}, before "
                    f"MinSnap = {min_snap}.",
                )
            branch = trees.main_branch(halos, row.id, row.snap, min_snap)
            out.extend(format_row(hid, snap) for hid, snap in branch)
        return out
