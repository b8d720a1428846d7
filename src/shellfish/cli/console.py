"""Rich console used for every human-facing diagnostic.

stdout belongs to the catalog stream, so the console always targets
stderr.  ``soft_wrap`` keeps long paths in error messages on one line.
"""

from __future__ import annotations

from rich.console import Console

console = Console(stderr=True, soft_wrap=True, highlight=False)
