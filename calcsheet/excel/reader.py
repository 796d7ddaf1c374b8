from __future__ import annotations

import zipfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..processors.columns import missing_headers

"""Takeoff file reader.

Reads the first worksheet of an ``.xlsx`` file (or a ``.csv`` file) into the
raw data shape the pipeline consumes: the first line is the header row, every
following line a data row. Empty cells become ``""``; fully empty rows are
kept because they separate drilled foundation pile groups.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "SheetReadError",
    "RawSheet",
    "read_raw_data",
    "frame_to_rows",
    "normalize_headers",
]

SUPPORTED_SUFFIXES = (".xlsx", ".csv")


class SheetReadError(Exception):
    """Raised when an input file cannot be read or has no header row."""


@dataclass
class RawSheet:
    sheet_name: str
    headers: list[str]
    rows: list[list[Any]]
    missing_columns: list[str]

    @property
    def raw_data(self) -> list[list[Any]]:
        return [list(self.headers), *self.rows]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if value is pd.NaT:
        return ""
    return value


def frame_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    """DataFrame read with ``header=None`` -> list rows, NaN cells as ``""``."""
    # object dtype turns numpy scalars into plain Python values
    cleaned = df.astype(object).where(df.notna(), "")
    return cleaned.values.tolist()


def normalize_headers(headers: Sequence[Any]) -> tuple[list[str], list[str]]:
    """Header cells stripped to strings, plus the required headers that are missing."""
    normalized = ["" if _cell(h) == "" else str(h).strip() for h in headers]
    return normalized, missing_headers(normalized)


def _na_options(keep_na_strings: list[str] | None) -> dict[str, Any]:
    """Keep the listed strings (e.g. 'NA') as text instead of pandas' default NaN conversion."""
    if not keep_na_strings:
        return {}
    import pandas._libs.parsers as parsers

    return {
        "keep_default_na": False,
        "na_values": list(parsers.STR_NA_VALUES - set(keep_na_strings)),
    }


def _read_frame(path: Path, sheet_name: str | None, keep_na_strings: list[str] | None) -> tuple[str, pd.DataFrame]:
    options = _na_options(keep_na_strings)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return path.stem, pd.read_csv(path, header=None, skip_blank_lines=False, **options)
    if suffix == ".xlsx":
        xls = pd.ExcelFile(path, engine="openpyxl")
        if not xls.sheet_names:
            raise SheetReadError(f"{path.name}: workbook has no sheets")
        name = sheet_name if sheet_name is not None else str(xls.sheet_names[0])
        if name not in [str(n) for n in xls.sheet_names]:
            raise SheetReadError(f"{path.name}: sheet '{name}' not found")
        return name, xls.parse(name, header=None, **options)
    raise SheetReadError(f"{path.name}: unsupported file type '{path.suffix}'")


def read_raw_data(
    path: Path,
    sheet_name: str | None = None,
    keep_na_strings: list[str] | None = None,
) -> RawSheet:
    """Read ``path`` into a RawSheet.

    Missing required headers are reported in ``missing_columns`` rather than
    raised; the pipeline degrades on its own.

    Raises:
        SheetReadError: the file is unreadable, of an unsupported type, or empty.
    """
    try:
        name, df = _read_frame(path, sheet_name, keep_na_strings)
    except SheetReadError:
        raise
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise SheetReadError(f"{path.name}: {e}") from e
    rows = frame_to_rows(df)
    if not rows:
        raise SheetReadError(f"{path.name}: no header row")
    headers, missing = normalize_headers(rows[0])
    return RawSheet(sheet_name=name, headers=headers, rows=rows[1:], missing_columns=missing)
