"""Decide which ``.config`` file plays which role.

Two files may be in play: the global config and an optional mode
config.  The global config comes either from ``$SHELLFISH_GLOBAL_CONFIG``
or from the trailing positional files.

With ``$SHELLFISH_GLOBAL_CONFIG`` unset:

* 0 files: error, nothing to load.
* 1 file: it is the global config; the mode uses its defaults.
* 2 files: global config, then mode config.
* more: error.

With ``$SHELLFISH_GLOBAL_CONFIG`` set, the variable names the global
config and at most one positional file, the mode config, is allowed.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from shellfish.core.global_config import GlobalConfig
from shellfish.core.models import Invocation
from shellfish.exceptions import InvocationError
from shellfish.utils.log import get_logger

GLOBAL_CONFIG_ENV_VAR = "SHELLFISH_GLOBAL_CONFIG"

log = get_logger(__name__)


def _env_override(environ: Mapping[str, str] | None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(GLOBAL_CONFIG_ENV_VAR, "")


def global_config_path(
    invocation: Invocation,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Return the path of the global config for *invocation*.

    Raises
    ------
    InvocationError
        If the number of positional config files does not fit the table
        in the module docstring.
    """
    override = _env_override(environ)
    n = invocation.config_count
    if override:
        if n > 1:
            raise InvocationError(
                f"${GLOBAL_CONFIG_ENV_VAR} has been set, so you may only pass "
                f"a single config file as a parameter (got {n}).",
                hint=f"Unset ${GLOBAL_CONFIG_ENV_VAR} or drop the positional "
                "global config.",
            )
        return Path(override)

    if n == 0:
        raise InvocationError(
            "No config files provided in command line arguments.",
            hint=f"Pass a global .config file or set ${GLOBAL_CONFIG_ENV_VAR}.",
        )
    if n == 1:
        return Path(invocation.config_files[-1])
    if n == 2:
        return Path(invocation.config_files[-2])
    raise InvocationError(
        f"Passed too many config files as arguments ({n}); at most two "
        "(global, then mode) are allowed.",
    )


def resolve_global_config(
    invocation: Invocation,
    environ: Mapping[str, str] | None = None,
) -> tuple[Path, GlobalConfig]:
    """Locate and load the global config.

    Returns the file path, which later becomes the provenance of the
    memoization snapshot, together with the parsed config.
    """
    path = global_config_path(invocation, environ)
    log.debug("loading global config %s", path)
    return path, GlobalConfig.from_file(path)


def resolve_mode_config_path(
    invocation: Invocation,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Return the mode config path, or ``None`` when mode defaults apply."""
    override = _env_override(environ)
    n = invocation.config_count
    if override and n == 1:
        return Path(invocation.config_files[-1])
    if not override and n == 2:
        return Path(invocation.config_files[-1])
    return None
