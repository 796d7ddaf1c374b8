from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..assembler.calculation_sheet import generate_calculation_sheet
from ..excel.reader import SUPPORTED_SUFFIXES, SheetReadError, read_raw_data
from ..formulas.apply import resolve_cell_writes
from ..logging.error_log import (
    FILE_LEVEL_SHEET,
    MISSING_COLUMNS,
    READ_ERROR,
    UNCLAIMED_ROW,
    ErrorLogBuffer,
    ErrorRecord,
)
from ..models.processing_result import FileStat, ProcessingResult
from ..models.sheet import CalculationSheet
from .progress import ProgressTracker

"""Service orchestration: input files -> calculation sheet JSON documents.

For every input file the raw takeoff is read, the calculation sheet is
generated and its formulas resolved into cell writes, and the result is
written to ``<output_dir>/<stem>.calculation.json``. Unreadable files and
unclaimed rows go to the JSON Lines error log, which is flushed once at the
end of the run.
"""

__all__ = [
    "ProcessingError",
    "DEFAULT_OUTPUT_DIR",
    "OUTPUT_SUFFIX",
    "scan_input_files",
    "sheet_to_document",
    "write_sheet",
    "unclaimed_error_records",
    "process_paths",
]

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")
OUTPUT_SUFFIX = ".calculation.json"


class ProcessingError(Exception):
    """Fatal error that stops the whole run (missing input, unsupported file)."""


def scan_input_files(paths: Iterable[Path]) -> list[Path]:
    """Expand ``paths`` into the input files to process.

    Directories contribute their ``.xlsx``/``.csv`` files (non-recursive,
    sorted by name); Office lock files (``~$...``) are ignored.

    Raises:
        ProcessingError: a path does not exist or names an unsupported file
    """
    files: list[Path] = []
    for path in paths:
        if not path.exists():
            raise ProcessingError(f"input not found: {path}")
        if path.is_dir():
            try:
                found = sorted(
                    p for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES and not p.name.startswith("~$")
                )
            except OSError as e:
                raise ProcessingError(f"error reading directory {path}: {e}") from e
            files.extend(found)
        elif path.suffix.lower() in SUPPORTED_SUFFIXES:
            files.append(path)
        else:
            raise ProcessingError(f"unsupported file type: {path}")
    return files


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "item"):
        return value.item()
    return str(value)


def _spec_to_dict(spec: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"row": spec.row_number, "item_type": spec.item_type, "section": spec.section}
    if spec.subsection is not None:
        out["subsection"] = spec.subsection
    for name in ("first_row", "last_row", "ref_row"):
        ref = getattr(spec, name)
        if ref is not None:
            out[name] = ref.number
    if spec.refs:
        out["refs"] = [ref.number for ref in spec.refs]
    if spec.item is not None and spec.item.raw_row_number > 0:
        out["raw_row_number"] = spec.item.raw_row_number
    return out


def sheet_to_document(sheet: CalculationSheet, source: str) -> dict[str, Any]:
    return {
        "source": source,
        "template_id": sheet.template_id,
        "rows": sheet.rows,
        "formulas": [_spec_to_dict(spec) for spec in sheet.formulas],
        "cell_writes": [{"cell": w.cell_ref, "value": w.value} for w in resolve_cell_writes(sheet)],
        "rock_excavation_totals": asdict(sheet.rock_excavation_totals),
        "line_drill_total_ft": sheet.line_drill_total_ft,
        "proposal_text": sheet.proposal_text,
        "unclaimed_rows": [asdict(row) for row in sheet.unclaimed_rows],
    }


def write_sheet(document: dict[str, Any], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(document, ensure_ascii=False, indent=2, default=_json_default), encoding="utf-8")
    return output_path


def unclaimed_error_records(sheet: CalculationSheet, file_name: str, sheet_name: str) -> list[ErrorRecord]:
    return [
        ErrorRecord.create(
            file=file_name,
            sheet=sheet_name,
            row=row.raw_row_number,
            error_type=UNCLAIMED_ROW,
            message=row.particulars,
        )
        for row in sheet.unclaimed_rows
    ]


def _process_single_file(
    file_path: Path,
    template_id: str | None,
    output_dir: Path,
    error_log: ErrorLogBuffer,
) -> FileStat:
    start = datetime.now(UTC)

    def elapsed() -> float:
        return (datetime.now(UTC) - start).total_seconds()

    try:
        raw = read_raw_data(file_path)
    except SheetReadError as e:
        logger.error(f"{file_path.name}: {e}")
        error_log.append(ErrorRecord.create(file_path.name, FILE_LEVEL_SHEET, -1, READ_ERROR, str(e)))
        return FileStat(file_path.name, "failed", 0, 0, 0, elapsed())

    if raw.missing_columns:
        message = f"missing columns: {', '.join(raw.missing_columns)}"
        logger.warning(f"{file_path.name}: {message}")
        error_log.append(ErrorRecord.create(file_path.name, raw.sheet_name, -1, MISSING_COLUMNS, message))

    sheet = generate_calculation_sheet(template_id, raw.raw_data)
    error_log.extend(unclaimed_error_records(sheet, file_path.name, raw.sheet_name))
    if sheet.unclaimed_rows:
        logger.warning(f"{file_path.name}: {len(sheet.unclaimed_rows)} unclaimed rows")

    output_path = output_dir / f"{file_path.stem}{OUTPUT_SUFFIX}"
    try:
        write_sheet(sheet_to_document(sheet, file_path.name), output_path)
    except OSError as e:
        logger.error(f"{file_path.name}: cannot write {output_path}: {e}")
        return FileStat(file_path.name, "failed", 0, 0, len(sheet.unclaimed_rows), elapsed())

    logger.info(f"{file_path.name}: rows={len(sheet.rows)} formulas={len(sheet.formulas)} -> {output_path}")
    return FileStat(
        file_name=file_path.name,
        status="success",
        rows=len(sheet.rows),
        formulas=len(sheet.formulas),
        unclaimed_rows=len(sheet.unclaimed_rows),
        elapsed_seconds=elapsed(),
        output_path=str(output_path),
    )


def process_paths(
    paths: Iterable[Path],
    template_id: str | None = None,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
) -> ProcessingResult:
    """Generate one calculation sheet per input file.

    Raises:
        ProcessingError: For fatal errors that prevent processing
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()
    file_paths = scan_input_files(paths)

    file_stats: list[FileStat] = []
    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            stat = _process_single_file(file_path, template_id, output_dir, error_log)
            file_stats.append(stat)
            progress.finish_file(stat)

    # Flush error log once
    counts = error_log.counts_by_type()
    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"error log flush failed: {e}")
    else:
        if log_path is not None:
            detail = " ".join(f"{k}={v}" for k, v in sorted(counts.items()))
            logger.info(f"error log: {log_path} ({detail})")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=progress.success,
        failed_files=progress.failed,
        total_rows=sum(s.rows for s in file_stats),
        total_formulas=sum(s.formulas for s in file_stats),
        total_unclaimed_rows=progress.unclaimed,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
