from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.sheet import SHEET_WIDTH, FormulaSpec, RowRecord, RowRef

"""Row/formula accumulator for one calculation sheet.

Rows are appended in final order and every FormulaSpec is appended right
after the row it describes, so ``spec.row`` always equals the row count at
the time of the append. Section totals that are only known once a section is
complete (the foundation CY aggregate, the trenching total) are appended as
deferred specs pointing back at an existing row.
"""

__all__ = [
    "AlignmentError",
    "SheetBuilder",
]


class AlignmentError(Exception):
    """Raised when a FormulaSpec does not point at the row it describes."""


class SheetBuilder:
    def __init__(self, columns: Sequence[str] | None = None, width: int = SHEET_WIDTH) -> None:
        self.width = width
        self.rows: list[list[Any]] = []
        self.formulas: list[FormulaSpec] = []
        if columns is not None:
            self.append_cells(list(columns))

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def last_row(self) -> RowRef:
        if not self.rows:
            raise AlignmentError("no rows appended yet")
        return RowRef(len(self.rows))

    @property
    def next_row_number(self) -> int:
        return len(self.rows) + 1

    def append_cells(self, cells: Sequence[Any]) -> RowRef:
        row = list(cells)
        if len(row) < self.width:
            row.extend([""] * (self.width - len(row)))
        self.rows.append(row)
        return RowRef(len(self.rows))

    def append_row(self, record: RowRecord | None = None) -> RowRef:
        return self.append_cells((record or RowRecord.blank()).to_cells())

    def blank(self) -> RowRef:
        return self.append_row()

    def append_formula(self, spec: FormulaSpec, *, deferred: bool = False) -> FormulaSpec:
        """Record ``spec``; it must describe the last row unless ``deferred``."""
        number = spec.row.number
        if not 1 <= number <= len(self.rows):
            raise AlignmentError(f"formula for row {number} but sheet has {len(self.rows)} rows")
        if not deferred and number != len(self.rows):
            raise AlignmentError(f"formula for row {number} appended after row {len(self.rows)}")
        self.formulas.append(spec)
        return spec

    def emit(self, record: RowRecord, item_type: str, section: str, **spec_fields: Any) -> RowRef:
        """Append a row and the spec describing it."""
        ref = self.append_row(record)
        self.append_formula(FormulaSpec(row=ref, item_type=item_type, section=section, **spec_fields))
        return ref

    def check_alignment(self) -> None:
        for spec in self.formulas:
            if not 1 <= spec.row.number <= len(self.rows):
                raise AlignmentError(f"formula for row {spec.row.number} is outside the sheet")
