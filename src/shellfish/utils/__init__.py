"""Shared utilities: value parsing and logging setup.

Rules
-----
* No business logic.
* Importable by any layer.
"""
