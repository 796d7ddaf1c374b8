from __future__ import annotations

import json
import pathlib

import jsonschema
import pytest

from calcsheet.services.orchestrator import process_paths

"""Error log JSON schema contract test."""

SCHEMA_PATH = pathlib.Path(__file__).parent / "schemas" / "error_log_schema.json"


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_error_log_schema_valid_example():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "takeoff.xlsx",
        "sheet": "Sheet1",
        "row": 14,
        "error_type": "UNCLAIMED_ROW",
        "message": "Mystery item nobody knows",
    }
    jsonschema.validate(record, _schema())


def test_error_log_schema_rejects_extra_key():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "takeoff.xlsx",
        "sheet": "<FILE_LEVEL>",
        "row": -1,
        "error_type": "READ_ERROR",
        "message": "File is not a zip file",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())


def test_written_error_log_matches_schema(temp_workdir: pathlib.Path, write_takeoff_csv, sample_rows):
    good = write_takeoff_csv("job.csv", sample_rows)
    cols = write_takeoff_csv("cols.csv", [["x", 1]], header=["Description", "Total"])
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"garbage")

    process_paths([good, cols, bad], output_dir=temp_workdir / "out")

    log = next((temp_workdir / "logs").glob("errors-*.log"))
    records = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
    schema = _schema()
    for record in records:
        jsonschema.validate(record, schema)
    assert {r["error_type"] for r in records} == {"UNCLAIMED_ROW", "MISSING_COLUMNS", "READ_ERROR"}
