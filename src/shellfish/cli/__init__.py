"""CLI layer: command routing, help text and the error boundary.

This package is the outermost layer of the application.  It may import
from ``core``, ``modes``, ``infra`` and ``utils``, but no other layer may
import from ``cli``.
"""
