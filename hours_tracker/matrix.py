"""
Helpers for positional access to sheet data.

Workbook readers and JSON exports hand back a sheet either as a grid (list of
rows, each a list of cells) or as a list of keyed records. Everything
downstream works on grids, so records are converted here. Tolerant cell
coercion helpers live here as well.
"""

import math
import re
from typing import Any, Dict, List, Optional, Sequence

from .date_utils import is_number


Grid = List[List[Any]]

LEADING_NUMBER = re.compile(r'^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')


def normalize_to_matrix(rows: Optional[Sequence[Any]]) -> Grid:
    """
    Convert sheet rows into a rectangular-enough grid.

    - Grid input (every row a list) is returned unchanged.
    - Record input (dicts) becomes a header row holding the union of all
      keys in first-seen order, followed by one row per record; keys missing
      from a record yield None.
    - Rows that are not lists or tuples become empty rows in a grid.
    - Empty input, or input that is not a list of rows, yields an empty grid.

    Args:
        rows: Sheet rows as a grid or as a list of records

    Returns:
        Grid of cells
    """
    if not rows or not isinstance(rows, (list, tuple)):
        return []

    if any(isinstance(r, (list, tuple)) for r in rows):
        if all(isinstance(r, list) for r in rows):
            return rows
        return [list(r) if isinstance(r, (list, tuple)) else [] for r in rows]

    if not any(isinstance(r, dict) for r in rows):
        return []

    headers: List[str] = []
    seen = set()
    records: List[Dict[str, Any]] = [r if isinstance(r, dict) else {} for r in rows]
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)

    matrix: Grid = [list(headers)]
    for record in records:
        matrix.append([record.get(h) for h in headers])
    return matrix


def cell_at(row: Sequence[Any], index: int) -> Any:
    """Cell at index, or None when the row is too short."""
    if not isinstance(row, (list, tuple)):
        return None
    if index < 0 or index >= len(row):
        return None
    return row[index]


def leading_number(text: str) -> Optional[float]:
    """
    Parse the numeric prefix of a string.

    Mirrors the forgiving parse used for hand-typed cells: "8.5h" -> 8.5,
    "2025x" -> 2025.0, "abc" -> None.
    """
    match = LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(0))


def parse_hours_cell(cell: Any) -> Optional[float]:
    """
    Read an hours value from a cell.

    Numbers pass through; strings use a comma as decimal separator when
    present ("3,5" -> 3.5). Blank and unparseable cells return None.
    """
    if is_number(cell):
        value = float(cell)
    elif isinstance(cell, str):
        value = leading_number(cell.replace(',', '.', 1))
        if value is None:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def cell_to_text(cell: Any) -> str:
    """
    Stringify a cell for free-text fields.

    Empty-ish cells (None, "", 0) become "". Whole floats drop their
    fractional part.
    """
    if cell is None or cell == '' or (is_number(cell) and cell == 0):
        return ''
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)
