from __future__ import annotations

import json
import re
from pathlib import Path

from calcsheet.cli.__main__ import main as cli_main

"""SUMMARY output contract: one labeled line, fixed key order, printed last."""

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/(\d+) success=(\d+) failed=(\d+) rows=(\d+) "
    r"formulas=(\d+) unclaimed=(\d+) elapsed_sec=(\d+(\.\d+)?)$"
)
LABEL_RE = re.compile(r"^(DEBUG|INFO|WARN|ERROR|CRITICAL|SUMMARY) ")


def test_summary_line_format_and_position(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    path = write_takeoff_csv("job.csv", sample_rows)
    assert cli_main([str(path)]) == 0
    lines = [line for line in capsys.readouterr().out.splitlines() if line]

    assert all(LABEL_RE.match(line) for line in lines)
    summary = [line for line in lines if line.startswith("SUMMARY")]
    assert len(summary) == 1
    assert lines[-1] == summary[0]

    m = SUMMARY_RE.match(summary[0])
    assert m is not None
    files, total, success, failed, rows, formulas, unclaimed = (int(m.group(i)) for i in range(1, 8))
    assert (files, total, success, failed, unclaimed) == (1, 1, 1, 0, 1)
    assert rows > 0 and formulas > 0


def test_summary_counts_match_written_document(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    path = write_takeoff_csv("job.csv", sample_rows)
    cli_main([str(path), "--output-dir", "out"])
    m = SUMMARY_RE.match(capsys.readouterr().out.splitlines()[-1])
    doc = json.loads((temp_workdir / "out" / "job.calculation.json").read_text(encoding="utf-8"))
    assert int(m.group(5)) == len(doc["rows"])
    assert int(m.group(6)) == len(doc["formulas"])
