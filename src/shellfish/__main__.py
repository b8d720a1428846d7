"""Allow ``python -m shellfish`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m shellfish`` behaves identically to the ``shellfish``
console script.
"""

from __future__ import annotations

from shellfish.cli.app import cli

if __name__ == "__main__":
    cli()
