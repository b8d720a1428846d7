"""Base class shared by every stage of the toolchain.

A mode owns a mutable config record that is filled in three ordered
passes, last write wins:

1. dataclass defaults (:meth:`Mode.read_config` always starts here),
2. the ``[<mode>.config]`` section of the mode config file, if any,
3. ``--Key value`` (or ``--Key=value``) command-line flags
   (:meth:`Mode.apply_flags`).

The dispatcher runs all three passes and validation through
:meth:`Mode.configure` before it touches the memoization directory, then
hands the input lines to :meth:`Mode.transform`.  :meth:`Mode.run` does the
flag pass, validation and transform in one call on an already-read config.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar

from shellfish.core.catalog import header, parse_catalog
from shellfish.core.config_file import (
    config_fields,
    parse_values,
    read_section,
    render_example,
)
from shellfish.core.environment import Environment
from shellfish.core.global_config import GlobalConfig
from shellfish.core.protocols import Kernel
from shellfish.exceptions import InvocationError, StageError


class _FlagParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise InvocationError(
            f"Could not parse the flags for {self.prog}: {message}",
            hint="Flags have the form --Key value or --Key=value; see "
            f"'shellfish help {self.prog.split()[-1]}.config'.",
        )


def _attach_values(flags: Sequence[str], options: set[str]) -> list[str]:
    """Rewrite each ``--Key value`` pair as ``--Key=value``.

    argparse treats a value such as ``-1e3`` as an option of its own unless
    it is attached to its flag.
    """
    out: list[str] = []
    i = 0
    while i < len(flags):
        token = flags[i]
        if token in options and i + 1 < len(flags) and flags[i + 1] not in options:
            out.append(f"{token}={flags[i + 1]}")
            i += 2
        else:
            out.append(token)
            i += 1
    return out


class Mode:
    """A named stage: config schema plus a ``run`` operation."""

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    reads_stdin: ClassVar[bool] = True
    config_type: ClassVar[type] = type(None)

    def __init__(self) -> None:
        self.config: Any = self.config_type()

    @property
    def section(self) -> str:
        return f"{self.name}.config"

    # ------------------------------------------------------------------
    # Configuration passes
    # ------------------------------------------------------------------

    def read_config(self, path: str | Path | None) -> None:
        """Reset to defaults, then apply the mode config file at *path*.

        ``None`` means no mode config was given and the defaults stand.
        """
        self.config = self.config_type()
        if path is None:
            return
        path = Path(path)
        raw = read_section(path, self.section)
        self._assign(parse_values(self.config_type, raw, source=f"config file '{path}'"))

    def apply_flags(self, flags: Sequence[str]) -> None:
        """Override config values with ``--Key value`` flags."""
        if not flags:
            return
        parser = _FlagParser(
            prog=f"shellfish {self.name}",
            add_help=False,
            allow_abbrev=False,
        )
        options: set[str] = set()
        for field in config_fields(self.config_type):
            key = field.metadata["key"]
            options.add(f"--{key}")
            parser.add_argument(
                f"--{key}",
                dest=key,
                default=argparse.SUPPRESS,
                metavar="VALUE",
                help=field.metadata["doc"],
            )
        namespace = parser.parse_args(_attach_values(flags, options))
        raw: dict[str, str] = vars(namespace)
        self._assign(parse_values(self.config_type, raw, source="command line flags"))

    def _assign(self, values: dict[str, Any]) -> None:
        for attr, value in values.items():
            setattr(self.config, attr, value)

    def validate(self, gconfig: GlobalConfig) -> None:
        """Check the final config record; raise :class:`ConfigError` on failure."""

    def configure(
        self,
        path: str | Path | None,
        flags: Sequence[str],
        gconfig: GlobalConfig,
    ) -> None:
        """Run every config pass and validate the result."""
        self.read_config(path)
        self.apply_flags(flags)
        self.validate(gconfig)

    def example_config(self) -> str:
        return render_example(
            self.config_type(),
            self.section,
            title=f"Example config file for the {self.name} mode.",
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(
        self,
        flags: Sequence[str],
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        """Apply *flags*, validate, and transform *lines* into output lines."""
        self.apply_flags(flags)
        self.validate(gconfig)
        return self.transform(gconfig, env, lines)

    def transform(
        self,
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        raise NotImplementedError


class KernelMode(Mode):
    """A stage whose computation is delegated to an injected :class:`Kernel`.

    The mode validates the shape of its input catalog and frames the
    kernel's output with a column header.
    """

    min_columns: ClassVar[int] = 2
    output_columns: ClassVar[tuple[str, ...]] = ("ID", "Snapshot")

    def __init__(self, kernel: Kernel | None = None) -> None:
        super().__init__()
        self.kernel: Kernel | None = kernel

    def transform(
        self,
        gconfig: GlobalConfig,
        env: Environment,
        lines: list[str],
    ) -> list[str]:
        rows = parse_catalog(lines, self.min_columns)
        if self.kernel is None:
            raise StageError(
                f"The {self.name} mode has no computation kernel installed.",
                hint=f"Construct the {self.name} mode with a kernel before "
                "dispatching it.",
            )
        out = self.kernel(self.config, gconfig, env, rows)
        return [header(self.output_columns), *out]
