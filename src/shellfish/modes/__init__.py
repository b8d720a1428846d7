"""The closed registry of Shellfish stages.

Modes are looked up by name in :data:`MODES`; the set is fixed at import
time and cannot be extended from the command line.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from shellfish.exceptions import UnknownModeError
from shellfish.modes.base import KernelMode, Mode
from shellfish.modes.coord import CoordMode
from shellfish.modes.ids import IdMode
from shellfish.modes.prof import ProfMode
from shellfish.modes.shell import ShellMode
from shellfish.modes.stats import StatsMode
from shellfish.modes.tree import TreeMode

ModeFactory = Callable[[], Mode]

MODES: dict[str, ModeFactory] = {
    "id": IdMode,
    "tree": TreeMode,
    "coord": CoordMode,
    "prof": ProfMode,
    "shell": ShellMode,
    "stats": StatsMode,
}
"""Mode name -> factory, in pipeline order."""


def get_mode(name: str, registry: Mapping[str, ModeFactory] | None = None) -> Mode:
    """Instantiate the mode called *name*.

    Raises
    ------
    UnknownModeError
        If *name* is not registered.
    """
    registry = MODES if registry is None else registry
    factory = registry.get(name)
    if factory is None:
        raise UnknownModeError(
            f"You passed me the mode '{name}', which I don't recognize.",
            hint="For help, type 'shellfish help'.",
        )
    return factory()


__all__: list[str] = [
    "MODES",
    "CoordMode",
    "IdMode",
    "KernelMode",
    "Mode",
    "ModeFactory",
    "ProfMode",
    "ShellMode",
    "StatsMode",
    "TreeMode",
    "get_mode",
]
