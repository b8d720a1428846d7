"""Converters from config-file / command-line strings to typed values.

Config files and ``--Key value`` flags share these parsers so the same
text always means the same thing in both places.  Every parser raises
``ValueError`` on bad input; callers attach the file or flag name.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Parser = Callable[[str], Any]

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


def parse_str(text: str) -> str:
    """Return *text* stripped of surrounding whitespace and quotes."""
    value = text.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value


def parse_int(text: str) -> int:
    return int(parse_str(text))


def parse_float(text: str) -> float:
    return float(parse_str(text))


def parse_bool(text: str) -> bool:
    value = parse_str(text).lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {text!r}")


def _split_list(text: str) -> list[str]:
    value = parse_str(text)
    if not value:
        return []
    return [item.strip() for item in value.split(",")]


def parse_strs(text: str) -> tuple[str, ...]:
    """Parse a comma-separated list of strings (``"a, b, c"``)."""
    items = _split_list(text)
    if any(item == "" for item in items):
        raise ValueError(f"empty element in list {text!r}")
    return tuple(items)


def parse_ints(text: str) -> tuple[int, ...]:
    return tuple(int(item) for item in _split_list(text))


def render_value(value: Any) -> str:
    """Render a typed value back into config-file syntax."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (tuple, list)):
        return ", ".join(render_value(item) for item in value)
    return str(value)
