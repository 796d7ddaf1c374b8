from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from calcsheet.excel.reader import SheetReadError, frame_to_rows, normalize_headers, read_raw_data


def test_read_csv(write_takeoff_csv, sample_rows):
    path = write_takeoff_csv("takeoff.csv", sample_rows)
    raw = read_raw_data(path)
    assert raw.sheet_name == "takeoff"
    assert raw.headers == ["Page", "Digitizer Item", "Total", "Units", "Count", "Estimate"]
    assert raw.missing_columns == []
    assert len(raw.rows) == len(sample_rows)
    assert raw.rows[0][1] == 'Demo SOG 4" thick'
    # blank separator rows survive as all-empty rows
    assert all(cell == "" for cell in raw.rows[5])
    assert raw.raw_data[0] == raw.headers


def test_read_xlsx_first_sheet(temp_workdir: Path, headers, sample_rows):
    path = temp_workdir / "data" / "takeoff.xlsx"
    pd.DataFrame(sample_rows, columns=headers).to_excel(path, index=False, sheet_name="Takeoff")
    raw = read_raw_data(path)
    assert raw.sheet_name == "Takeoff"
    assert raw.headers[1] == "Digitizer Item"
    assert raw.rows[2][1] == "Exc (H=10'-0\")"


def test_missing_columns_are_reported(write_takeoff_csv):
    path = write_takeoff_csv("odd.csv", [["x", 1]], header=["Description", "Total"])
    raw = read_raw_data(path)
    assert raw.missing_columns == ["digitizer item", "units"]


def test_keep_na_strings(write_takeoff_csv):
    path = write_takeoff_csv("na.csv", [[1, "Item", 5, "NA", "", ""]])
    assert read_raw_data(path).rows[0][3] == ""
    assert read_raw_data(path, keep_na_strings=["NA"]).rows[0][3] == "NA"


def test_empty_file_raises(temp_workdir: Path):
    path = temp_workdir / "data" / "empty.csv"
    path.write_bytes(b"")
    with pytest.raises(SheetReadError):
        read_raw_data(path)


def test_corrupt_xlsx_raises(temp_workdir: Path):
    path = temp_workdir / "data" / "broken.xlsx"
    path.write_bytes(b"not a zip archive")
    with pytest.raises(SheetReadError, match="broken.xlsx"):
        read_raw_data(path)


def test_unsupported_suffix_raises(temp_workdir: Path):
    path = temp_workdir / "data" / "notes.txt"
    path.write_text("hello", encoding="utf-8")
    with pytest.raises(SheetReadError, match="unsupported file type"):
        read_raw_data(path)


def test_frame_to_rows_blanks_nan():
    df = pd.DataFrame([["a", None, 1.5], [float("nan"), "b", None]])
    assert frame_to_rows(df) == [["a", "", 1.5], ["", "b", ""]]


def test_normalize_headers():
    headers, missing = normalize_headers([" Digitizer Item ", None, "TOTAL", "units"])
    assert headers == ["Digitizer Item", "", "TOTAL", "units"]
    assert missing == []
