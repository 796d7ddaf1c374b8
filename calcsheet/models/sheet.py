from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from .items import Item

"""Sheet-level models: row references, named row records, formula specs.

RowRecord is the only place that knows the positional layout of the 13
template columns; everything upstream works with named fields.
"""

__all__ = [
    "SHEET_WIDTH",
    "COLUMN_LETTERS",
    "RowRef",
    "RowRecord",
    "FormulaSpec",
    "CellFormulas",
    "CellWrite",
    "RockExcavationTotals",
    "UnclaimedRow",
    "CalculationSheet",
]

SHEET_WIDTH = 13
COLUMN_LETTERS = "ABCDEFGHIJKLM"

CellValue = Any  # str | int | float


@dataclass(frozen=True, order=True)
class RowRef:
    """1-based row number inside one sheet's ``rows``.

    Only SheetBuilder creates these; a RowRef always points at a row that
    already exists.
    """
    number: int

    def __int__(self) -> int:
        return self.number

    def __str__(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class RowRecord:
    """Named-field view of one output row."""
    estimate: CellValue = ""
    particulars: CellValue = ""
    takeoff: CellValue = ""
    unit: CellValue = ""
    qty: CellValue = ""
    length: CellValue = ""
    width: CellValue = ""
    height: CellValue = ""
    ft: CellValue = ""
    sq_ft: CellValue = ""
    lbs: CellValue = ""
    cy: CellValue = ""
    qty_final: CellValue = ""
    raw_row_number: int | None = None  # serialized as a 14th cell when present

    def to_cells(self) -> list[CellValue]:
        cells = [getattr(self, f.name) for f in fields(self)[:SHEET_WIDTH]]
        if self.raw_row_number is not None:
            cells.append(self.raw_row_number)
        return cells

    @classmethod
    def blank(cls) -> RowRecord:
        return cls()


@dataclass(frozen=True)
class FormulaSpec:
    """What one row needs computed downstream.

    ``item_type`` selects the generator (data rows) or resolver (sum/derived rows).
    """
    row: RowRef
    item_type: str
    section: str
    subsection: str | None = None
    item: Item | None = None  # parsedData for data rows
    first_row: RowRef | None = None  # sum range
    last_row: RowRef | None = None
    ref_row: RowRef | None = None  # referenced row (Havg, line drill labels, backpacking ...)
    refs: tuple[RowRef, ...] = ()  # multi-row references (foundation CY aggregate)
    data: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def row_number(self) -> int:
        return self.row.number


@dataclass
class CellFormulas:
    """Per-row formula set; ``None`` leaves the cell untouched."""
    ft: Any = None
    sq_ft: Any = None
    lbs: Any = None
    cy: Any = None
    qty_final: Any = None
    takeoff: Any = None
    length: Any = None
    width: Any = None
    height: Any = None
    qty: Any = None
    particulars: Any = None
    unit: Any = None

    def items(self) -> list[tuple[str, Any]]:
        return [(f.name, getattr(self, f.name)) for f in fields(self) if getattr(self, f.name) is not None]


@dataclass(frozen=True)
class CellWrite:
    cell_ref: str  # e.g. "I12"
    value: Any  # "=H12*C12" or a literal number/string


@dataclass(frozen=True)
class RockExcavationTotals:
    total_sq_ft: float = 0.0
    total_cy: float = 0.0


@dataclass(frozen=True)
class UnclaimedRow:
    row_index: int  # 0-based data index
    raw_row_number: int
    particulars: str


@dataclass
class CalculationSheet:
    """Result of one pipeline run."""
    template_id: str
    rows: list[list[CellValue]]
    formulas: list[FormulaSpec]
    rock_excavation_totals: RockExcavationTotals = field(default_factory=RockExcavationTotals)
    line_drill_total_ft: float = 0.0
    items: dict[str, Any] = field(default_factory=dict)  # per-category raw item lists
    unclaimed_rows: list[UnclaimedRow] = field(default_factory=list)
    proposal_text: str | None = None
