"""Line-oriented catalogs exchanged between pipeline stages.

Every data line starts with a halo ID and a snapshot index, followed by
any number of numeric columns.  Lines starting with ``#`` are comments
and blank lines are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from shellfish.core.models import CatalogRow
from shellfish.exceptions import StageError

COMMENT = "#"


def parse_catalog(lines: Sequence[str], min_columns: int = 2) -> list[CatalogRow]:
    """Parse catalog *lines* into rows with at least *min_columns* columns.

    Raises
    ------
    StageError
        If a data line is too short or a column is not numeric.
    """
    rows: list[CatalogRow] = []
    for line_num, line in enumerate(lines, start=1):
        text = line.strip()
        if not text or text.startswith(COMMENT):
            continue
        tokens = text.split()
        if len(tokens) < min_columns:
            raise StageError(
                f"Line {line_num} of the input catalog has {len(tokens)} "
                f"columns, but at least {min_columns} are needed: '{text}'",
            )
        try:
            rows.append(
                CatalogRow(
                    id=int(tokens[0]),
                    snap=int(tokens[1]),
                    values=tuple(float(tok) for tok in tokens[2:]),
                ),
            )
        except ValueError as exc:
            raise StageError(
                f"Could not parse line {line_num} of the input catalog: '{text}'",
            ) from exc
    return rows


def header(columns: Sequence[str]) -> str:
    """Return the ``# Column contents:`` comment line for *columns*."""
    labels = " ".join(f"{name}({i})" for i, name in enumerate(columns))
    return f"{COMMENT} Column contents: {labels}"


def format_row(halo_id: int, snap: int, values: Iterable[float] = ()) -> str:
    """Format one data line; floats use ``%.8g``."""
    parts = [str(halo_id), str(snap)]
    parts.extend(f"{value:.8g}" for value in values)
    return " ".join(parts)
