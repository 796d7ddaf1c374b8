from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Aggregated results of a multi-file run (used for the SUMMARY line)."""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics."""
    file_name: str
    status: str  # success/failed
    rows: int  # output rows written
    formulas: int
    unclaimed_rows: int
    elapsed_seconds: float
    output_path: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    success_files: int
    failed_files: int
    total_rows: int  # output rows across files
    total_formulas: int
    total_unclaimed_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
