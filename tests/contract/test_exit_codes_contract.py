from __future__ import annotations

from pathlib import Path

from calcsheet.cli.__main__ import main as cli_main

"""Exit code contract tests: 0 all files ok, 2 partial failure, 1 fatal."""


def test_exit_code_fatal_missing_input(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.xlsx")])
    captured = capsys.readouterr()
    assert code == 1
    assert "ERROR processing: input not found" in captured.out
    assert "SUMMARY" not in captured.out


def test_exit_code_fatal_unsupported_file(temp_workdir: Path, capsys):
    path = temp_workdir / "data" / "takeoff.pdf"
    path.write_bytes(b"%PDF")
    assert cli_main([str(path)]) == 1
    assert "ERROR processing: unsupported file type" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    write_takeoff_csv("a.csv", sample_rows)
    write_takeoff_csv("b.csv", sample_rows[:2])
    code = cli_main([str(temp_workdir / "data")])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0" in out


def test_exit_code_partial_failure(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    write_takeoff_csv("good.csv", sample_rows)
    (temp_workdir / "data" / "corrupt.xlsx").write_bytes(b"not a workbook")
    code = cli_main([str(temp_workdir / "data")])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR corrupt.xlsx:" in out
    assert "SUMMARY files=2/2 success=1 failed=1" in out


def test_exit_code_empty_directory(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data")])
    assert code == 0
    assert "SUMMARY files=0/0 success=0 failed=0" in capsys.readouterr().out


def test_exit_code_fatal_no_paths(temp_workdir: Path, capsys):
    assert cli_main([]) == 1
    assert "ERROR processing: no input paths given" in capsys.readouterr().out
