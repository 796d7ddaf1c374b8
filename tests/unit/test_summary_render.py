from __future__ import annotations

from datetime import UTC, datetime

import pytest

from calcsheet.models.processing_result import FileStat, ProcessingResult
from calcsheet.services.summary import format_elapsed, render_summary_line

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _result(success=2, failed=1, rows=150, formulas=90, unclaimed=3, elapsed=1.5) -> ProcessingResult:
    return ProcessingResult(
        success_files=success,
        failed_files=failed,
        total_rows=rows,
        total_formulas=formulas,
        total_unclaimed_rows=unclaimed,
        start_time=T0,
        end_time=T0,
        elapsed_seconds=elapsed,
    )


def test_render_summary_line():
    line = render_summary_line(3, _result())
    assert line == "SUMMARY files=3/3 success=2 failed=1 rows=150 formulas=90 unclaimed=3 elapsed_sec=1.5"


def test_render_summary_line_no_files():
    line = render_summary_line(0, _result(0, 0, 0, 0, 0, 0.0))
    assert line == "SUMMARY files=0/0 success=0 failed=0 rows=0 formulas=0 unclaimed=0 elapsed_sec=0"


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0"), (2.0, "2"), (1.23456, "1.235"), (0.0005, "0.0005")],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_file_stat_defaults():
    stat = FileStat("a.csv", "success", 10, 4, 1, 0.2)
    assert stat.output_path is None
