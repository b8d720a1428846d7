"""``shellfish help``: usage overview, per-mode summaries and example configs."""

from __future__ import annotations

from shellfish.core.global_config import GlobalConfig
from shellfish.core.resolver import GLOBAL_CONFIG_ENV_VAR
from shellfish.modes import MODES

OVERVIEW = f"""\
The tools in the Shellfish toolchain are:

{{usage}}

Each tool takes an optional tool-specific config file. Without one, default
values are used. Config variables can also be set with flags of the form

    shellfish id --IDType ID --IDs "0, 1, 2"

A flag and its value may also be joined with "=", as in --MassMin=-1e3.

If a config file and a flag give different values to the same variable, the
flag wins.

Every tool also needs a global config file (ending in ".config"). Pass it
before the tool-specific config file, or set ${GLOBAL_CONFIG_ENV_VAR}.
For a documented global config file, type

    shellfish help config

The tools read a catalog from stdin and write a catalog to stdout (the id
tool reads nothing from stdin), so they are usually piped together:

    shellfish id example.id.config | shellfish coord | shellfish shell

For more on a single tool, type any of:

    shellfish help [ {{modes}} ]
    shellfish help [ {{configs}} ]"""


def overview() -> str:
    usage = "\n".join(
        f"    shellfish {name:<6} [flags] [global.config] [____.{name}.config]"
        for name in MODES
    )
    return OVERVIEW.format(
        usage=usage,
        modes=" | ".join(MODES),
        configs=" | ".join(f"{name}.config" for name in MODES),
    )


def help_targets() -> dict[str, str]:
    """Return every ``shellfish help <target>`` text, keyed by target."""
    targets: dict[str, str] = {"config": GlobalConfig().example_config()}
    for name, factory in MODES.items():
        mode = factory()
        stdin = "reads a catalog from stdin" if mode.reads_stdin else "takes no input from stdin"
        targets[name] = (
            f"{mode.description}\n\nThe {name} tool {stdin}. For a documented "
            f"example config file, type:\n\n    shellfish help {name}.config"
        )
        targets[f"{name}.config"] = mode.example_config()
    return targets


def render_help(args: list[str]) -> str:
    """Return the text for ``shellfish help`` followed by *args*."""
    if not args:
        return overview()
    if len(args) > 1:
        return "The help mode can only take a single argument."
    text = help_targets().get(args[0])
    if text is None:
        return f"I don't recognize the help target '{args[0]}'."
    return text
