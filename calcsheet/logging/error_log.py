from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Unclaimed-row and file-level error log.

Records collected during a run are written as JSON Lines to
``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC). The name is chosen on the first
flush that has records, and later flushes of the same buffer append to it.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "LOGS_DIR",
    "TIMESTAMP_FMT",
    "UNCLAIMED_ROW",
    "READ_ERROR",
    "MISSING_COLUMNS",
    "FILE_LEVEL_SHEET",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

UNCLAIMED_ROW = "UNCLAIMED_ROW"
READ_ERROR = "READ_ERROR"
MISSING_COLUMNS = "MISSING_COLUMNS"

# sheet name of records that concern the whole input file
FILE_LEVEL_SHEET = "<FILE_LEVEL>"


class ErrorLogBuffer:
    """Collects ErrorRecords for one run; not thread safe."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    def __len__(self) -> int:
        return len(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def counts_by_type(self) -> dict[str, int]:
        """Pending records per ``error_type``."""
        return dict(Counter(r.error_type for r in self._pending))

    def _log_file(self) -> Path:
        if self._target is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self._target = self.logs_dir / f"errors-{datetime.now(UTC).strftime(TIMESTAMP_FMT)}.log"
        return self._target

    def flush(self) -> Path | None:
        """Write pending records and clear them; ``None`` when there was nothing to write."""
        if not self._pending:
            return None
        target = self._log_file()
        lines = "".join(f"{record.to_json_line()}\n" for record in self._pending)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(lines)
        self._pending.clear()
        return target
