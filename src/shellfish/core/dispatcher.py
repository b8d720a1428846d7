"""Mode dispatcher: drives one invocation from ``argv`` to output lines.

Phases run strictly in order::

    START -> CLASSIFIED -> CONFIG_RESOLVED -> MEMO_VALIDATED
          -> BACKEND_READY -> DISPATCHED -> SUCCEEDED

Any :class:`~shellfish.exceptions.ShellfishError` moves the dispatcher to
``FAILED`` and propagates; nothing is retried or rolled back.

Piped modes read stdin before any config is touched.  An empty input
ends the invocation successfully with no output, and an input that is
exactly one upstream failure marker short-circuits the whole stage.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TextIO

from shellfish.core.args import classify
from shellfish.core.backends import init_catalogs, init_halos
from shellfish.core.environment import Environment
from shellfish.core.memo import check_memo_dir
from shellfish.core.models import Phase
from shellfish.core.resolver import resolve_global_config, resolve_mode_config_path
from shellfish.exceptions import ShellfishError, StageError, UpstreamFailureError
from shellfish.modes import MODES, ModeFactory, get_mode
from shellfish.utils.log import get_logger

FAILURE_MARKER_PREFIX = "Shellfish"
"""Every stage failure prints a stdout line starting with this prefix."""

TERMINATION_NOTICE = f"{FAILURE_MARKER_PREFIX} terminating."

log = get_logger(__name__)


def read_lines(stream: TextIO) -> list[str]:
    """Read *stream* to completion and split it into lines.

    A single trailing empty line (from the final newline) is dropped.
    """
    try:
        text = stream.read()
    except OSError as exc:
        raise StageError(f"Error reading stdin: {exc.strerror or exc}.") from exc
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def is_failure_marker(lines: Sequence[str]) -> bool:
    """Whether *lines* is exactly one upstream failure marker."""
    return len(lines) == 1 and lines[0].startswith(FAILURE_MARKER_PREFIX)


class ModeDispatcher:
    """Runs a single invocation.

    Parameters
    ----------
    registry:
        Mode name -> factory.  Defaults to :data:`shellfish.modes.MODES`.
    environ:
        Environment variables consulted for ``$SHELLFISH_GLOBAL_CONFIG``.
        Defaults to :data:`os.environ`.
    """

    def __init__(
        self,
        registry: Mapping[str, ModeFactory] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._registry: Mapping[str, ModeFactory] = MODES if registry is None else registry
        self._environ: Mapping[str, str] = os.environ if environ is None else environ
        self.phase: Phase = Phase.START
        self.mode_name: str | None = None

    def _advance(self, phase: Phase) -> None:
        log.debug("%s: %s -> %s", self.mode_name, self.phase.value, phase.value)
        self.phase = phase

    def dispatch(self, argv: Sequence[str], stdin: TextIO) -> list[str]:
        """Run the invocation *argv* and return its output lines.

        Raises
        ------
        ShellfishError
            Any fatal error; :attr:`phase` is ``FAILED`` afterwards.
        """
        try:
            return self._dispatch(argv, stdin)
        except ShellfishError:
            self._advance(Phase.FAILED)
            raise

    def _dispatch(self, argv: Sequence[str], stdin: TextIO) -> list[str]:
        if self.phase is not Phase.START:
            raise RuntimeError("A ModeDispatcher runs exactly one invocation.")

        invocation = classify(argv)
        self.mode_name = invocation.mode
        mode = get_mode(invocation.mode, self._registry)
        self._advance(Phase.CLASSIFIED)

        lines: list[str] = []
        if mode.reads_stdin:
            lines = read_lines(stdin)
            if not lines:
                log.debug("%s: empty input, nothing to do", mode.name)
                self._advance(Phase.SUCCEEDED)
                return []
            if is_failure_marker(lines):
                raise UpstreamFailureError(lines[0])

        config_path, gconfig = resolve_global_config(invocation, self._environ)
        mode.configure(
            resolve_mode_config_path(invocation, self._environ),
            invocation.flags,
            gconfig,
        )
        self._advance(Phase.CONFIG_RESOLVED)

        check_memo_dir(gconfig.memo_dir, config_path, gconfig)
        self._advance(Phase.MEMO_VALIDATED)

        env = Environment(memo_dir=Path(gconfig.memo_dir))
        init_catalogs(gconfig, env)
        init_halos(mode.name, gconfig, env)
        self._advance(Phase.BACKEND_READY)

        self._advance(Phase.DISPATCHED)
        out = mode.transform(gconfig, env, lines)
        self._advance(Phase.SUCCEEDED)
        return out
