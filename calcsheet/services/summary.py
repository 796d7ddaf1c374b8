from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering."""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Integral values without a fraction, tiny values without scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
    formulas={formulas} unclaimed={unclaimed} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_rows=120, total_formulas=80,
        ...     total_unclaimed_rows=2, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 rows=120 formulas=80 unclaimed=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"formulas={result.total_formulas} "
        f"unclaimed={result.total_unclaimed_rows} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
