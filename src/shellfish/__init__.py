"""shellfish: dispatcher for the Shellfish splashback-shell toolchain.

Routes each invocation to one pipeline stage ("mode"), resolves the global
and mode configuration, guards the memoization directory, and activates the
catalog backends the stage reads from.
"""

from shellfish.version import __version__

__all__: list[str] = ["__version__"]
