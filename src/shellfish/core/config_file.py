"""Reading ``.config`` files into dataclass records.

A config file is INI-style text with a single section::

    [config]
    SnapshotType = LGadget-2
    BlockMins = 0, 0, 0

Records are dataclasses whose fields are declared with :func:`option`,
which binds each attribute to its CamelCase file key, a value parser and
a one-line description used for example configs and ``--help``.
"""

from __future__ import annotations

import configparser
import dataclasses
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from shellfish.exceptions import ConfigError
from shellfish.utils.values import Parser, render_value

_MISSING = dataclasses.MISSING


def option(
    key: str,
    parse: Parser,
    default: Any = _MISSING,
    *,
    doc: str = "",
) -> Any:
    """Declare a config field bound to file key *key*."""
    metadata = {"key": key, "parse": parse, "doc": doc}
    if isinstance(default, (list, dict, set)):
        raise TypeError("use tuples for list-valued config defaults")
    return dataclasses.field(default=default, metadata=metadata)


def config_fields(record_type: Any) -> tuple[dataclasses.Field, ...]:
    """Return the :func:`option`-declared fields of a record class."""
    return tuple(f for f in dataclasses.fields(record_type) if "key" in f.metadata)


def field_by_key(record_type: Any) -> dict[str, dataclasses.Field]:
    return {f.metadata["key"]: f for f in config_fields(record_type)}


def read_section(path: Path, section: str) -> dict[str, str]:
    """Read the raw ``key -> text`` pairs of *section* in *path*.

    Raises
    ------
    ConfigError
        If the file cannot be read, does not parse, or lacks *section*.
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        inline_comment_prefixes=("#", ";"),
        strict=True,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        with path.open("r", encoding="utf-8") as handle:
            parser.read_file(handle, source=str(path))
    except OSError as exc:
        raise ConfigError(
            f"Could not read config file '{path}': {exc.strerror or exc}",
        ) from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(
            f"Config file '{path}' is not valid UTF-8: {exc.reason} "
            f"at byte {exc.start}",
        ) from exc
    except configparser.Error as exc:
        raise ConfigError(
            f"Could not parse config file '{path}': {exc}",
        ) from exc

    if not parser.has_section(section):
        found = ", ".join(f"[{name}]" for name in parser.sections()) or "none"
        raise ConfigError(
            f"Config file '{path}' has no [{section}] section (found: {found}).",
        )
    return dict(parser.items(section))


def parse_values(
    record_type: Any,
    raw: Mapping[str, str],
    *,
    source: str,
) -> dict[str, Any]:
    """Convert raw text values into typed keyword arguments for *record_type*.

    *source* names the file or flag set the text came from and is used
    in error messages.
    """
    fields = field_by_key(record_type)
    values: dict[str, Any] = {}
    for key, text in raw.items():
        field = fields.get(key)
        if field is None:
            raise ConfigError(
                f"Unknown variable '{key}' in {source}.",
                hint=f"Valid variables are: {', '.join(sorted(fields))}.",
            )
        try:
            values[field.name] = field.metadata["parse"](text)
        except ValueError as exc:
            raise ConfigError(
                f"Could not parse '{key} = {text}' in {source}: {exc}",
            ) from exc
    return values


def render_example(record: Any, section: str, *, title: str = "") -> str:
    """Render a documented config file holding the values of *record*."""
    lines: list[str] = []
    if title:
        lines.extend(f"# {line}" if line else "#" for line in title.splitlines())
        lines.append("")
    lines.append(f"[{section}]")
    for field in config_fields(type(record)):
        doc = field.metadata["doc"]
        if doc:
            lines.append("")
            lines.extend(f"# {line}" for line in doc.splitlines())
        value = render_value(getattr(record, field.name))
        lines.append(f"{field.metadata['key']} = {value}".rstrip())
    return "\n".join(lines) + "\n"
