from __future__ import annotations

import json
import re
from pathlib import Path

import pandas as pd

from calcsheet.cli.__main__ import main as cli_main

"""Integration test: successful multi-file run over real .xlsx and .csv inputs.

Verifies end-to-end CLI execution, the written calculation documents and the
SUMMARY line totals.
"""


def _make_excel_file(path: Path, headers: list[str], rows: list[list[object]], sheet_name: str = "Takeoff") -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows, columns=headers).to_excel(writer, sheet_name=sheet_name, index=False)
        # only the first worksheet is read
        pd.DataFrame([["ignored"]]).to_excel(writer, sheet_name="Notes", index=False, header=False)
    return path


def test_run_success_xlsx_and_csv(temp_workdir: Path, headers, sample_rows, write_takeoff_csv, capsys):
    _make_excel_file(temp_workdir / "data" / "north.xlsx", headers, sample_rows)
    write_takeoff_csv("south.csv", sample_rows[:3])

    code = cli_main([str(temp_workdir / "data"), "--output-dir", "out"])
    out = capsys.readouterr().out
    assert code == 0

    north = json.loads((temp_workdir / "out" / "north.calculation.json").read_text(encoding="utf-8"))
    south = json.loads((temp_workdir / "out" / "south.calculation.json").read_text(encoding="utf-8"))
    assert north["source"] == "north.xlsx"
    assert north["proposal_text"] is not None
    assert south["proposal_text"] is None
    assert [u["particulars"] for u in north["unclaimed_rows"]] == ["Mystery item nobody knows"]
    assert south["unclaimed_rows"] == []

    m = re.search(r"SUMMARY files=2/2 success=2 failed=0 rows=(\d+) formulas=(\d+) unclaimed=1 ", out)
    assert m is not None
    assert int(m.group(1)) == len(north["rows"]) + len(south["rows"])
    assert int(m.group(2)) == len(north["formulas"]) + len(south["formulas"])


def test_run_writes_cell_writes_for_every_data_row(temp_workdir: Path, headers, sample_rows):
    path = _make_excel_file(temp_workdir / "data" / "job.xlsx", headers, sample_rows)
    assert cli_main([str(path), "--output-dir", "out"]) == 0
    doc = json.loads((temp_workdir / "out" / "job.calculation.json").read_text(encoding="utf-8"))
    written_rows = {int(re.sub(r"^[A-M]", "", w["cell"])) for w in doc["cell_writes"]}
    data_rows = {f["row"] for f in doc["formulas"] if f.get("raw_row_number")}
    assert data_rows
    assert data_rows <= written_rows
