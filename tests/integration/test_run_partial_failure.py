from __future__ import annotations

import json
from pathlib import Path

from calcsheet.cli.__main__ import main as cli_main

"""Integration test: one unreadable input does not stop the others."""


def test_partial_failure_run(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    write_takeoff_csv("a_good.csv", sample_rows)
    (temp_workdir / "data" / "b_broken.xlsx").write_bytes(b"\x00\x01 not a workbook")
    write_takeoff_csv("c_good.csv", sample_rows[:1])
    (temp_workdir / "data" / "d_empty.csv").write_bytes(b"")

    code = cli_main([str(temp_workdir / "data"), "--output-dir", "out"])
    out = capsys.readouterr().out

    assert code == 2
    assert "SUMMARY files=4/4 success=2 failed=2" in out
    assert sorted(p.name for p in (temp_workdir / "out").iterdir()) == [
        "a_good.calculation.json",
        "c_good.calculation.json",
    ]

    log = next((temp_workdir / "logs").glob("errors-*.log"))
    records = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
    read_errors = sorted(r["file"] for r in records if r["error_type"] == "READ_ERROR")
    assert read_errors == ["b_broken.xlsx", "d_empty.csv"]
    assert [r["file"] for r in records if r["error_type"] == "UNCLAIMED_ROW"] == ["a_good.csv"]
