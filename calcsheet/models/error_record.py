from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Row ``-1`` marks a file-level error (unreadable input, unsupported type)
where no single raw row is to blame.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: input file name
        sheet: worksheet name, or "<FILE_LEVEL>"
        row: 1-based raw row number, -1 for file-level errors
        error_type: UPPER_SNAKE classification (UNCLAIMED_ROW, READ_ERROR ...)
        message: description (the row text for unclaimed rows)
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
