"""Domain models for the calculation sheet pipeline.

Items and groups flow out of the processors; rows, row references and
formula specs are produced by the sheet assembler.
"""

from .error_record import ErrorRecord
from .items import Group, Item, ParsedItem
from .processing_result import FileStat, ProcessingResult
from .sheet import (
    COLUMN_LETTERS,
    SHEET_WIDTH,
    CalculationSheet,
    CellFormulas,
    CellWrite,
    FormulaSpec,
    RockExcavationTotals,
    RowRecord,
    RowRef,
    UnclaimedRow,
)

__all__ = [
    # Pipeline models
    "ParsedItem",
    "Item",
    "Group",
    # Sheet models
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
    # Run reporting
    "ErrorRecord",
    "FileStat",
    "ProcessingResult",
]
