"""Custom exception hierarchy for shellfish.

All exceptions that cross layer boundaries must inherit from
:class:`ShellfishError`.  Raw ``OSError`` / ``ValueError`` /
``configparser`` exceptions must be caught at the layer that touches the
resource and re-raised as a typed subclass defined here.

Hierarchy
---------
ShellfishError
├── InvocationError
├── ConfigError
├── MemoError
│   └── MemoMismatchError
├── BackendError
├── DispatchError
│   ├── UnknownModeError
│   └── UpstreamFailureError
└── StageError
"""

from __future__ import annotations


class ShellfishError(Exception):
    """Base exception for all shellfish errors.

    Every fatal condition of an invocation maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    and emit the pipeline termination notice.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Invocation shape ------------------------------------------------------

class InvocationError(ShellfishError):
    """Raised when the command line has the wrong shape.

    Covers missing modes and the wrong count or placement of ``.config``
    files, including an environment override combined with a positional
    global config.
    """


# --- Configuration ---------------------------------------------------------

class ConfigError(ShellfishError):
    """Raised when a configuration file is missing, malformed, or invalid."""


# --- Memoization directory -------------------------------------------------

class MemoError(ShellfishError):
    """Raised when the memoization directory cannot be used."""


class MemoMismatchError(MemoError):
    """Raised when ``memo.config`` disagrees with the current global config."""


# --- Backends --------------------------------------------------------------

class BackendError(ShellfishError):
    """Raised when a snapshot, halo or tree backend cannot be activated."""


# --- Dispatch --------------------------------------------------------------

class DispatchError(ShellfishError):
    """Raised when an invocation cannot be routed to a stage."""


class UnknownModeError(DispatchError):
    """Raised when the mode name is not in the registry."""


class UpstreamFailureError(DispatchError):
    """Raised when stdin carries the failure marker of an upstream stage.

    The marker line is kept verbatim so the CLI can forward it down the
    pipe unchanged.
    """

    def __init__(self, marker: str) -> None:
        super().__init__(f"Upstream stage failed: {marker}")
        self.marker: str = marker


# --- Stage execution -------------------------------------------------------

class StageError(ShellfishError):
    """Raised when a mode fails while transforming its input catalog."""
