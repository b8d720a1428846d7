"""Argument classifier: split an invocation into mode, flags and configs.

The command line has the shape::

    shellfish <mode> [flags ...] [global.config] [mode.config]

Config files are recognised purely by their ``.config`` suffix and must
form the trailing run of the token list.  Anything between the mode name
and that run is handed to the mode as flags.
"""

from __future__ import annotations

from collections.abc import Sequence

from shellfish.core.models import Invocation
from shellfish.exceptions import InvocationError

CONFIG_SUFFIX = ".config"


def is_config_file(token: str) -> bool:
    """Return ``True`` if *token* names a config file."""
    return token.endswith(CONFIG_SUFFIX)


def count_config_files(tokens: Sequence[str]) -> int:
    """Count the config files at the end of *tokens*.

    The scan runs backward and stops at the first token that is not a
    config file.  The count is not capped here; the resolvers decide
    how many are legal.
    """
    num = 0
    for token in reversed(tokens):
        if not is_config_file(token):
            break
        num += 1
    return num


def classify(argv: Sequence[str]) -> Invocation:
    """Partition a raw ``argv`` (program name first) into an :class:`Invocation`.

    Raises
    ------
    InvocationError
        If no mode was given.
    """
    if len(argv) < 2:
        raise InvocationError(
            "I was not supplied with a mode.",
            hint="For help, type 'shellfish help'.",
        )
    rest = list(argv[2:])
    n_configs = count_config_files(rest)
    split = len(rest) - n_configs
    return Invocation(
        program=argv[0],
        mode=argv[1],
        flags=tuple(rest[:split]),
        config_files=tuple(rest[split:]),
    )
