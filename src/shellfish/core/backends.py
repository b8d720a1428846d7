"""Backend initializer: activate the readers named by the global config.

The global config names one snapshot type, one halo type and one tree
type.  Each name is looked up in a fixed registry, constructed against
the config, optionally validated against the files on disk
(``ValidateFormats``), and stored on the :class:`Environment`.

Stages that work purely on already-derived catalogs
(:data:`HALO_FREE_MODES`) skip the halo and tree backends; every other
mode needs both.
"""

from __future__ import annotations

from shellfish.core.environment import Environment
from shellfish.core.global_config import NIL, GlobalConfig
from shellfish.exceptions import BackendError, ConfigError
from shellfish.infra.halos import HALO_BACKENDS
from shellfish.infra.snapshots import SNAPSHOT_BACKENDS
from shellfish.infra.trees import TREE_BACKENDS
from shellfish.utils.log import get_logger

HALO_FREE_MODES: frozenset[str] = frozenset({"shell", "stats", "prof"})

# Halo catalog types and the tree types whose annotations they carry.
COMPATIBLE_TREES: dict[str, frozenset[str]] = {
    "Text": frozenset({"consistent-trees"}),
}

log = get_logger(__name__)


def init_catalogs(gconfig: GlobalConfig, env: Environment) -> None:
    """Activate the snapshot backend for ``SnapshotType``.

    Raises
    ------
    ConfigError
        If ``SnapshotType`` has no registered backend.
    BackendError
        If ``ValidateFormats`` is set and the files on disk are inconsistent.
    """
    backend_type = SNAPSHOT_BACKENDS.get(gconfig.snapshot_type)
    if backend_type is None:
        raise ConfigError(f"Unrecognized SnapshotType '{gconfig.snapshot_type}'.")
    backend = backend_type(gconfig)
    if gconfig.validate_formats:
        backend.validate()
    env.snapshots = backend
    log.debug("activated %s snapshot backend", gconfig.snapshot_type)


def init_halos(mode: str, gconfig: GlobalConfig, env: Environment) -> None:
    """Activate the halo and tree backends that *mode* needs.

    The tree/halo compatibility check runs before anything is activated,
    so a failed invocation never leaves a half-initialized environment.

    Raises
    ------
    ConfigError
        If either type is ``nil`` or unknown, or the two are incompatible.
    BackendError
        If a backend cannot be activated or fails validation.
    """
    if mode in HALO_FREE_MODES:
        log.debug("mode %s does not read halo catalogs", mode)
        return

    if gconfig.halo_type == NIL:
        raise ConfigError(f"You may not use nil as a HaloType for the mode '{mode}'.")
    if gconfig.tree_type == NIL:
        raise ConfigError(f"You may not use nil as a TreeType for the mode '{mode}'.")

    halo_type = HALO_BACKENDS.get(gconfig.halo_type)
    tree_type = TREE_BACKENDS.get(gconfig.tree_type)
    if halo_type is None:
        raise ConfigError(
            f"Unrecognized HaloType '{gconfig.halo_type}' for the mode '{mode}'.",
        )
    if tree_type is None:
        raise ConfigError(
            f"Unrecognized TreeType '{gconfig.tree_type}' for the mode '{mode}'.",
        )
    compatible = COMPATIBLE_TREES.get(gconfig.halo_type, frozenset())
    if gconfig.tree_type not in compatible:
        raise ConfigError(
            f"You're trying to use the '{gconfig.tree_type}' TreeType with "
            f"the '{gconfig.halo_type}' HaloType.",
            hint=f"Compatible tree types: {', '.join(sorted(compatible)) or 'none'}.",
        )

    try:
        halos = halo_type(gconfig)
        trees = tree_type(gconfig)
        if gconfig.validate_formats:
            halos.validate()
            trees.validate()
    except BackendError as exc:
        raise BackendError(
            f"Could not initialize the backends for the mode '{mode}': {exc}",
            hint=exc.hint,
        ) from exc

    env.halos = halos
    env.trees = trees
    log.debug(
        "activated %s halo and %s tree backends", gconfig.halo_type, gconfig.tree_type,
    )
