from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..parsers.dimensions import parse_number

"""Header lookup and raw row access.

Columns are located by case-insensitive, trimmed header match. A processor
that cannot find its required columns gets ``None`` from ``resolve_columns``
and returns an empty result.
"""

__all__ = [
    "DIGITIZER_ITEM",
    "TOTAL",
    "UNITS",
    "ESTIMATE",
    "COUNT",
    "PAGE",
    "REQUIRED_HEADERS",
    "find_column",
    "ColumnMap",
    "resolve_columns",
    "missing_headers",
    "RawLine",
    "iter_lines",
]

DIGITIZER_ITEM = "digitizer item"
TOTAL = "total"
UNITS = "units"
ESTIMATE = "estimate"
COUNT = "count"
PAGE = "page"

REQUIRED_HEADERS = (DIGITIZER_ITEM, TOTAL, UNITS)


def find_column(headers: Sequence[Any], name: str) -> int | None:
    target = name.strip().lower()
    for idx, h in enumerate(headers):
        if isinstance(h, str) and h.strip().lower() == target:
            return idx
    return None


def missing_headers(headers: Sequence[Any]) -> list[str]:
    return [name for name in REQUIRED_HEADERS if find_column(headers, name) is None]


@dataclass(frozen=True)
class ColumnMap:
    digitizer: int
    total: int
    units: int
    estimate: int | None = None
    count: int | None = None
    page: int | None = None
    influence: int | None = None


def _find_influence_column(headers: Sequence[Any]) -> int | None:
    for idx, h in enumerate(headers):
        if isinstance(h, str) and ("influ" in h.lower() or "note" in h.lower()):
            return idx
    return None


def resolve_columns(headers: Sequence[Any] | None) -> ColumnMap | None:
    if not headers:
        return None
    digitizer = find_column(headers, DIGITIZER_ITEM)
    total = find_column(headers, TOTAL)
    units = find_column(headers, UNITS)
    if digitizer is None or total is None or units is None:
        return None
    return ColumnMap(
        digitizer=digitizer,
        total=total,
        units=units,
        estimate=find_column(headers, ESTIMATE),
        count=find_column(headers, COUNT),
        page=find_column(headers, PAGE),
        influence=_find_influence_column(headers),
    )


def _cell(row: Sequence[Any], idx: int | None) -> Any:
    if idx is None or idx >= len(row):
        return None
    return row[idx]


@dataclass(frozen=True)
class RawLine:
    """One data row seen through a ColumnMap."""
    index: int  # 0-based data index
    text: Any  # Digitizer Item cell (may be None or non-string)
    total_raw: Any
    unit: Any
    estimate: Any
    count_raw: Any
    influence: Any

    @property
    def raw_row_number(self) -> int:
        return self.index + 2

    @property
    def total(self) -> float:
        """Total as a number, 0 when blank or non-numeric."""
        return parse_number(self.total_raw) or 0.0

    @property
    def total_or_blank(self) -> float | str:
        value = parse_number(self.total_raw)
        return value if value else ""

    @property
    def count(self) -> float | str:
        value = parse_number(self.count_raw)
        return value if value else ""

    @property
    def unit_text(self) -> str:
        return self.unit.strip() if isinstance(self.unit, str) else ("" if self.unit is None else str(self.unit))

    @property
    def estimate_text(self) -> str:
        return self.estimate.strip() if isinstance(self.estimate, str) else ""

    @property
    def is_blank_text(self) -> bool:
        return not isinstance(self.text, str) or not self.text.strip()


def iter_lines(rows: Sequence[Sequence[Any]], cols: ColumnMap) -> Iterator[RawLine]:
    for index, row in enumerate(rows):
        yield RawLine(
            index=index,
            text=_cell(row, cols.digitizer),
            total_raw=_cell(row, cols.total),
            unit=_cell(row, cols.units),
            estimate=_cell(row, cols.estimate),
            count_raw=_cell(row, cols.count),
            influence=_cell(row, cols.influence),
        )
