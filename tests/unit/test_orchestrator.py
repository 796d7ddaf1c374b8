from __future__ import annotations

import json
from pathlib import Path

import pytest

from calcsheet.services.orchestrator import (
    OUTPUT_SUFFIX,
    ProcessingError,
    process_paths,
    scan_input_files,
    unclaimed_error_records,
)
from calcsheet.assembler.calculation_sheet import generate_calculation_sheet


def test_scan_input_files_directory(temp_workdir: Path):
    data = temp_workdir / "data"
    (data / "b.xlsx").write_bytes(b"")
    (data / "a.csv").write_text("", encoding="utf-8")
    (data / "~$b.xlsx").write_bytes(b"")
    (data / "readme.txt").write_text("", encoding="utf-8")
    (data / "nested").mkdir()
    (data / "nested" / "c.csv").write_text("", encoding="utf-8")
    assert [p.name for p in scan_input_files([data])] == ["a.csv", "b.xlsx"]


def test_scan_input_files_missing_path(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="input not found"):
        scan_input_files([temp_workdir / "nope.xlsx"])


def test_scan_input_files_unsupported_file(temp_workdir: Path):
    path = temp_workdir / "data" / "takeoff.pdf"
    path.write_bytes(b"%PDF")
    with pytest.raises(ProcessingError, match="unsupported file type"):
        scan_input_files([path])


def test_process_paths_writes_document_and_error_log(temp_workdir: Path, write_takeoff_csv, sample_rows):
    path = write_takeoff_csv("job.csv", sample_rows)
    out_dir = temp_workdir / "out"

    result = process_paths([path], output_dir=out_dir)

    assert result.success_files == 1
    assert result.failed_files == 0
    assert result.total_unclaimed_rows == 1
    assert result.total_rows > 0 and result.total_formulas > 0

    doc = json.loads((out_dir / f"job{OUTPUT_SUFFIX}").read_text(encoding="utf-8"))
    assert doc["source"] == "job.csv"
    assert doc["template_id"] == "capstone"
    assert doc["rows"][0][:2] == ["Estimate", "Particulars"]
    assert doc["proposal_text"].startswith("F&I new (20)no")
    assert doc["unclaimed_rows"] == [{"row_index": 6, "raw_row_number": 8, "particulars": "Mystery item nobody knows"}]
    assert all(w["value"].startswith("=") or not isinstance(w["value"], str) for w in doc["cell_writes"])

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [(r["error_type"], r["row"], r["sheet"]) for r in records] == [("UNCLAIMED_ROW", 8, "job")]


def test_process_paths_unreadable_file_is_counted_failed(temp_workdir: Path, write_takeoff_csv, sample_rows):
    good = write_takeoff_csv("good.csv", sample_rows)
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"garbage")

    result = process_paths([bad, good], output_dir=temp_workdir / "out")

    assert (result.success_files, result.failed_files) == (1, 1)
    stats = {s.file_name: s for s in result.file_stats}
    assert stats["bad.xlsx"].status == "failed"
    assert stats["good.csv"].output_path is not None
    log = next((temp_workdir / "logs").glob("errors-*.log"))
    first = json.loads(log.read_text(encoding="utf-8").splitlines()[0])
    assert first["error_type"] == "READ_ERROR"
    assert first["sheet"] == "<FILE_LEVEL>"
    assert first["row"] == -1


def test_process_paths_missing_columns_logged(temp_workdir: Path, write_takeoff_csv):
    path = write_takeoff_csv("cols.csv", [["x", 1]], header=["Description", "Total"])
    result = process_paths([path], output_dir=temp_workdir / "out")
    assert result.success_files == 1
    log = next((temp_workdir / "logs").glob("errors-*.log"))
    record = json.loads(log.read_text(encoding="utf-8").splitlines()[0])
    assert record["error_type"] == "MISSING_COLUMNS"
    assert "digitizer item" in record["message"]


def test_no_error_log_without_errors(temp_workdir: Path, write_takeoff_csv):
    path = write_takeoff_csv("clean.csv", [[1, 'Demo SOG 4" thick', 100, "SQ FT", "", ""]])
    result = process_paths([path], output_dir=temp_workdir / "out")
    assert result.total_unclaimed_rows == 0
    assert list((temp_workdir / "logs").iterdir()) == []


def test_unclaimed_error_records(headers, sample_rows):
    sheet = generate_calculation_sheet("capstone", [headers, *sample_rows])
    records = unclaimed_error_records(sheet, "job.xlsx", "Sheet1")
    assert [(r.row, r.message) for r in records] == [(8, "Mystery item nobody knows")]
