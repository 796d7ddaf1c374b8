# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest

from calcsheet.config.loader import clear_template_cache
from calcsheet.logging.init import APP_LOGGER_NAME, reset_logging

HEADERS = ["Page", "Digitizer Item", "Total", "Units", "Count", "Estimate"]


def _row(text, total="", unit="", count="", estimate="", page=1) -> list:
    return [page, text, total, unit, count, estimate]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


def _detach_app_logger() -> None:
    # setup_logging() turns propagation off; caplog listens on the root logger
    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _clean_state():
    reset_logging()
    _detach_app_logger()
    clear_template_cache()
    yield
    reset_logging()
    _detach_app_logger()


@pytest.fixture()
def headers() -> list[str]:
    return list(HEADERS)


@pytest.fixture()
def sample_rows() -> list[list]:
    """A small takeoff touching demolition, excavation, SOE and one stray row."""
    return [
        _row('Demo SOG 4" thick', 1200, "SQ FT"),
        _row('Demo SOG 4" thick', 300, "SQ FT"),
        _row("Exc (H=10'-0\")", 5000, "SQ FT"),
        _row("Drilled soldier pile 24Ø x1 H=27'-6\" E=5'-0\"", 12, "EA"),
        _row("Drilled soldier pile 24Ø x1 H=26'-0\" E=5'-0\"", 8, "EA"),
        _row("", page=""),
        _row("Mystery item nobody knows", 3, "EA"),
    ]


@pytest.fixture()
def write_takeoff_csv(temp_workdir: Path, headers: list[str]):
    def _write(name: str, rows: list[list], header: list[str] | None = None) -> Path:
        import pandas as pd

        path = temp_workdir / "data" / name
        pd.DataFrame(rows, columns=header or headers).to_csv(path, index=False)
        return path

    return _write
