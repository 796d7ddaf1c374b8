from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..config.loader import DEFAULT_COLUMNS, DEFAULT_TEMPLATE_ID, Template, load_template
from ..models.items import Group
from ..models.sheet import CalculationSheet, UnclaimedRow
from ..parsers.soe import format_drilled_soldier_pile_proposal_text
from ..processors.columns import resolve_columns
from ..processors.pipeline import PipelineRun, run_pipeline
from .builder import SheetBuilder
from .sections import AssemblyState, emit_section
from .totals import line_drill_total_ft, rock_excavation_totals

"""Calculation sheet generation: raw takeoff rows in, rows + formula specs out.

``generate_calculation_sheet`` is the single entry point of the core. It
never raises for list-shaped input: processor failures are contained by the
pipeline, a section whose emission fails is logged and skipped, and anything
else falls back to a sheet holding only the column headers.
"""

__all__ = [
    "generate_calculation_sheet",
    "unclaimed_rows",
]

logger = logging.getLogger(__name__)


def _split(raw_data: Sequence[Sequence[Any]] | None) -> tuple[list[Any], list[Sequence[Any]]]:
    if not raw_data:
        return [], []
    return list(raw_data[0]), [row if row is not None else [] for row in raw_data[1:]]


def unclaimed_rows(run: PipelineRun, rows: Sequence[Sequence[Any]], headers: Sequence[Any]) -> list[UnclaimedRow]:
    """Non-empty data rows that no processor turned into an item."""
    cols = resolve_columns(headers)
    out = []
    for line in run.tracker.unused_rows(rows):
        text = ""
        if cols is not None and cols.digitizer < len(line.row):
            cell = line.row[cols.digitizer]
            text = "" if cell is None else str(cell)
        out.append(UnclaimedRow(row_index=line.row_index, raw_row_number=line.row_index + 2, particulars=text))
    return out


def _proposal_text(groups: Sequence[Group]) -> str | None:
    return format_drilled_soldier_pile_proposal_text([item for g in groups for item in g.items])


def _empty_sheet(template_id: str, columns: Sequence[str] = DEFAULT_COLUMNS) -> CalculationSheet:
    builder = SheetBuilder(columns)
    builder.blank()
    return CalculationSheet(template_id=template_id, rows=builder.rows, formulas=builder.formulas)


def _build(template: Template, raw_data: Sequence[Sequence[Any]] | None) -> CalculationSheet:
    headers, rows = _split(raw_data)
    run = run_pipeline(rows, headers)

    builder = SheetBuilder(template.columns)
    builder.blank()
    state = AssemblyState(builder=builder, run=run)
    for section in template.structure:
        try:
            emit_section(state, section)
        except Exception as e:
            logger.warning(f"section {section.section} skipped: {e}")
    builder.check_alignment()

    rock_items = run.results.get("rock_excavation") or []
    line_drill = run.results.get("line_drill") or []
    return CalculationSheet(
        template_id=template.id,
        rows=builder.rows,
        formulas=builder.formulas,
        rock_excavation_totals=rock_excavation_totals(rock_items),
        line_drill_total_ft=line_drill_total_ft(rock_items, line_drill),
        items=dict(run.results),
        unclaimed_rows=unclaimed_rows(run, rows, headers),
        proposal_text=_proposal_text(run.results.get("soldier_piles") or []),
    )


def generate_calculation_sheet(template_id: str | None, raw_data: Sequence[Sequence[Any]] | None) -> CalculationSheet:
    """Build the calculation sheet for ``raw_data`` (header row first) with template ``template_id``.

    Unknown template ids fall back to capstone. The returned sheet's first
    row holds the template column labels and the second is blank.
    """
    requested = template_id or DEFAULT_TEMPLATE_ID
    try:
        template = load_template(requested)
    except Exception as e:
        logger.error(f"template {requested}: {e}")
        return _empty_sheet(requested)
    try:
        sheet = _build(template, raw_data)
    except Exception as e:
        logger.error(f"calculation sheet generation failed: {e}")
        return _empty_sheet(template.id, template.columns)
    logger.debug(f"sheet {template.id}: rows={len(sheet.rows)} formulas={len(sheet.formulas)} unclaimed={len(sheet.unclaimed_rows)}")
    return sheet
