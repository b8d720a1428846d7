"""Shared pytest fixtures and configuration for the shellfish test suite.

Guidelines
----------
* Every file a test touches lives under ``tmp_path``.
* ``$SHELLFISH_GLOBAL_CONFIG`` is always cleared; tests that need it pass
  an explicit ``environ`` mapping.
* Numerical kernels are mocked at the :class:`Kernel` boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from shellfish.core.global_config import GlobalConfig
from shellfish.core.resolver import GLOBAL_CONFIG_ENV_VAR
from shellfish.utils.log import LEVEL_ENV_VAR

# Columns of the fake Rockstar-style halo catalogs.
HALO_COLUMNS: tuple[str, ...] = ("ID", "DescID", "X", "Y", "Z", "M200m", "R200m")

# Snapshot 0: the progenitors.  Halos 1 and 2 both merge into halo 10;
# halo 1 is the more massive one and therefore the main progenitor.
SNAP_0: list[tuple[float, ...]] = [
    (1, 10, 0.1, 0.0, 0.0, 8e13, 0.9),
    (2, 10, 0.3, 0.0, 0.0, 1e13, 0.4),
    (3, 12, 9.9, 10.0, 10.0, 1e13, 0.3),
    (4, -1, 5.0, 5.0, 5.0, 1e12, 0.1),
]

# Snapshot 1: halo 11 sits inside R200m of the more massive halo 10.
SNAP_1: list[tuple[float, ...]] = [
    (10, -1, 0.0, 0.0, 0.0, 1e14, 1.0),
    (11, -1, 0.5, 0.0, 0.0, 5e13, 0.5),
    (12, -1, 10.0, 10.0, 10.0, 2e13, 0.3),
]


@dataclass
class Sim:
    """A tiny two-snapshot simulation laid out under ``tmp_path``."""

    root: Path
    halo_dir: Path
    tree_dir: Path
    memo_dir: Path

    def global_values(self) -> dict[str, str]:
        return {
            "SnapshotType": "LGadget-2",
            "SnapMin": "0",
            "SnapMax": "1",
            "HaloDir": str(self.halo_dir),
            "HaloType": "Text",
            "TreeDir": str(self.tree_dir),
            "TreeType": "consistent-trees",
            "HaloValueNames": ", ".join(HALO_COLUMNS),
            "HaloValueColumns": ", ".join(str(i) for i in range(len(HALO_COLUMNS))),
            "MemoDir": str(self.memo_dir),
        }

    def write_config(
        self,
        name: str = "sim.config",
        **overrides: str | None,
    ) -> Path:
        """Write a global config; an override of ``None`` drops the key."""
        values = self.global_values()
        values.update(overrides)  # type: ignore[arg-type]
        return self.write_section(name, "config", values)

    def write_mode_config(self, mode: str, name: str | None = None, **values: str) -> Path:
        return self.write_section(name or f"sim.{mode}.config", f"{mode}.config", values)

    def write_section(self, name: str, section: str, values: dict[str, str | None]) -> Path:
        lines = [f"[{section}]"]
        lines.extend(f"{key} = {value}" for key, value in values.items() if value is not None)
        path = self.root / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    def gconfig(self, **overrides: str | None) -> GlobalConfig:
        return GlobalConfig.from_file(self.write_config(**overrides))


def _write_catalog(path: Path, rows: list[tuple[float, ...]]) -> None:
    lines = ["#" + " ".join(HALO_COLUMNS)]
    lines.extend(" ".join(str(value) for value in row) for row in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(GLOBAL_CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)


@pytest.fixture()
def sim(tmp_path: Path) -> Sim:
    halo_dir = tmp_path / "halos"
    tree_dir = tmp_path / "trees"
    memo_dir = tmp_path / "memo"
    for directory in (halo_dir, tree_dir, memo_dir):
        directory.mkdir()

    _write_catalog(halo_dir / "hlist_0.list", SNAP_0)
    _write_catalog(halo_dir / "hlist_1.list", SNAP_1)
    (tree_dir / "tree_0_0_0.dat").write_text(
        "#scale(0) id(1) desc_scale(2) desc_id(3)\n", encoding="utf-8",
    )
    return Sim(root=tmp_path, halo_dir=halo_dir, tree_dir=tree_dir, memo_dir=memo_dir)
