"""CLI application entry point and command routing for shellfish.

This module is the **sole error boundary** for the entire application.
It catches :class:`~shellfish.exceptions.ShellfishError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, renders the
diagnostic on stderr via Rich and returns well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; all work is delegated to the
  :class:`~shellfish.core.dispatcher.ModeDispatcher`.
* stdout carries catalog lines only.  On failure the one extra stdout
  line is the ``Shellfish terminating.`` notice, which downstream stages
  recognise as an upstream failure.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from typing import TextIO

from rich.markup import escape

from shellfish.cli import exit_codes
from shellfish.cli.console import console
from shellfish.cli.help import render_help
from shellfish.core.dispatcher import TERMINATION_NOTICE, ModeDispatcher
from shellfish.exceptions import ShellfishError, UpstreamFailureError
from shellfish.utils.log import get_logger, setup_logging
from shellfish.version import __version__

PROG = "shellfish"

log = get_logger(__name__)


def _write_lines(stdout: TextIO, lines: Sequence[str]) -> None:
    for line in lines:
        stdout.write(f"{line}\n")
    stdout.flush()


def _report(mode: str, exc: ShellfishError) -> None:
    console.print(f"[bold red]Error running mode {escape(mode)}:[/bold red]")
    console.print(escape(str(exc)))
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_mode(
    args: list[str],
    stdin: TextIO,
    stdout: TextIO,
    environ: Mapping[str, str] | None,
) -> int:
    """Run a pipeline stage and print its output catalog."""
    dispatcher = ModeDispatcher(environ=environ)
    try:
        out = dispatcher.dispatch([PROG, *args], stdin)
    except UpstreamFailureError as exc:
        log.info("%s: forwarding upstream failure", args[0])
        _write_lines(stdout, [exc.marker])
        return exit_codes.GENERAL_ERROR
    except ShellfishError as exc:
        _report(args[0], exc)
        _write_lines(stdout, [TERMINATION_NOTICE])
        return exit_codes.GENERAL_ERROR

    _write_lines(stdout, out)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run the shellfish CLI.

    Parameters
    ----------
    argv:
        Explicit argument list, without the program name.  When ``None``
        (default), ``sys.argv[1:]`` is used.
    stdin, stdout:
        Streams for the catalog pipeline; default to the process streams.
    environ:
        Environment variables; defaults to :data:`os.environ`.

    Returns
    -------
    int
        OS process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    setup_logging()

    if not args:
        console.print("[bold red]Error:[/bold red] I was not supplied with a mode.")
        console.print(f"[yellow]Hint:[/yellow] For help, type '{PROG} help'.")
        return exit_codes.GENERAL_ERROR

    command = args[0]
    if command == "help":
        _write_lines(stdout, [render_help(args[1:])])
        return exit_codes.SUCCESS
    if command == "version":
        _write_lines(stdout, [f"Shellfish version {__version__}"])
        return exit_codes.SUCCESS
    if command == "hello":
        _write_lines(stdout, ["Hello back at you! Installation was successful."])
        return exit_codes.SUCCESS

    return _handle_mode(args, stdin, stdout, environ)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        print(TERMINATION_NOTICE, flush=True)
        sys.exit(exit_codes.GENERAL_ERROR)
    sys.exit(code)
