"""Core layer: invocation classification, configuration and dispatch.

Rules
-----
* No ``print()`` calls and no Rich rendering.
* No imports from ``cli``.
* Data on disk is reached only through the protocols in
  :mod:`shellfish.core.protocols`; config files and the memoization
  directory are the only files the core touches itself.
"""
