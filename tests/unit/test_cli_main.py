from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from calcsheet.cli.__main__ import ENV_OUTPUT_DIR, ENV_TEMPLATE, main as cli_main
from calcsheet.config.loader import ConfigError


def test_cli_generates_sheet(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    path = write_takeoff_csv("job.csv", sample_rows)
    code = cli_main([str(path), "--output-dir", "out"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO template=capstone output=out" in out
    assert "WARN job.csv: 1 unclaimed rows" in out
    assert "SUMMARY files=1/1 success=1 failed=0" in out
    assert (temp_workdir / "out" / "job.calculation.json").exists()


def test_cli_debug_mode(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    path = write_takeoff_csv("job.csv", sample_rows)
    code = cli_main([str(path), "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert (temp_workdir / "output" / "job.calculation.json").exists()


def test_cli_env_file_sets_defaults(temp_workdir: Path, write_takeoff_csv, sample_rows, monkeypatch, capsys):
    # registered first so teardown removes what the .env file sets
    monkeypatch.setenv(ENV_OUTPUT_DIR, "unused")
    monkeypatch.setenv(ENV_TEMPLATE, "capstone")
    (temp_workdir / ".env").write_text(f"{ENV_OUTPUT_DIR}=from_env\n", encoding="utf-8")
    path = write_takeoff_csv("job.csv", sample_rows)
    assert cli_main([str(path)]) == 0
    assert (temp_workdir / "from_env" / "job.calculation.json").exists()


def test_cli_config_error_is_fatal(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    path = write_takeoff_csv("job.csv", sample_rows)
    with patch("calcsheet.cli.__main__.load_template", side_effect=ConfigError("template validation failed: boom")):
        code = cli_main([str(path)])
    assert code == 1
    assert "ERROR config: template validation failed: boom" in capsys.readouterr().out


def test_cli_inspect_data(temp_workdir: Path, write_takeoff_csv, sample_rows, capsys):
    write_takeoff_csv("job.csv", sample_rows)
    write_takeoff_csv("odd.csv", [["x"]], header=["Description"])
    code = cli_main([str(temp_workdir / "data"), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: job.csv" in out
    assert "SHEET: job cols=" in out
    assert "sample_rows=" in out
    assert "missing_columns=['digitizer item', 'total', 'units']" in out
    assert not (temp_workdir / "output").exists()
