from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .bpp import process_bpp_alternate_items
from .civil import process_civil_demo_items
from .demolition import process_demolition_items
from .excavation import (
    process_backfill_items,
    process_excavation_items,
    process_line_drill_items,
    process_mud_slab_items,
    process_rock_excavation_items,
)
from .foundation import process_foundation_items, process_misc_pile_items
from .soe import process_soe_items, process_soldier_pile_items, process_supporting_angle_items
from .superstructure import process_superstructure_items
from .tracker import RowClaimTracker
from .waterproofing import process_waterproofing_items

"""Ordered processor pipeline.

Processors share one RowClaimTracker. Most of them classify every row on
their own terms; steps marked ``skip_claimed`` only look at rows no earlier
step took, so they must run after the steps they defer to. A step that
raises is logged and contributes its empty result; the run continues.
"""

__all__ = [
    "PipelineStep",
    "PipelineRun",
    "PROCESSOR_PIPELINE",
    "validate_pipeline",
    "run_pipeline",
]

logger = logging.getLogger(__name__)

Processor = Callable[[Sequence[Sequence[Any]], Sequence[Any], "RowClaimTracker | None"], Any]


@dataclass(frozen=True)
class PipelineStep:
    name: str
    run: Processor
    empty: Callable[[], Any] = list
    skip_claimed: bool = False


PROCESSOR_PIPELINE: tuple[PipelineStep, ...] = (
    PipelineStep("demolition", process_demolition_items, dict),
    PipelineStep("excavation", process_excavation_items),
    PipelineStep("backfill", process_backfill_items),
    PipelineStep("mud_slab", process_mud_slab_items),
    PipelineStep("rock_excavation", process_rock_excavation_items),
    PipelineStep("line_drill", process_line_drill_items),
    PipelineStep("soldier_piles", process_soldier_pile_items),
    PipelineStep("supporting_angles", process_supporting_angle_items),
    PipelineStep("soe", process_soe_items, dict),
    PipelineStep("foundation", process_foundation_items, dict),
    PipelineStep("waterproofing", process_waterproofing_items, dict),
    PipelineStep("superstructure", process_superstructure_items, dict),
    PipelineStep("bpp_alternate", process_bpp_alternate_items, dict),
    PipelineStep("civil_demo", process_civil_demo_items, dict),
    # only rows every step above left alone
    PipelineStep("misc_piles", process_misc_pile_items, skip_claimed=True),
)


@dataclass
class PipelineRun:
    results: dict[str, Any] = field(default_factory=dict)
    failed_steps: list[str] = field(default_factory=list)
    tracker: RowClaimTracker = field(default_factory=RowClaimTracker)

    def __getitem__(self, name: str) -> Any:
        return self.results[name]


def validate_pipeline(steps: Sequence[PipelineStep]) -> None:
    """Step names are unique and every ``skip_claimed`` step follows all claiming steps."""
    names = [s.name for s in steps]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate pipeline step names: {names}")
    seen_skip = False
    for step in steps:
        if step.skip_claimed:
            seen_skip = True
        elif seen_skip:
            raise ValueError(f"step '{step.name}' claims rows after a skip_claimed step")


validate_pipeline(PROCESSOR_PIPELINE)


def run_pipeline(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    steps: Sequence[PipelineStep] = PROCESSOR_PIPELINE,
    tracker: RowClaimTracker | None = None,
) -> PipelineRun:
    run = PipelineRun(tracker=tracker if tracker is not None else RowClaimTracker())
    for step in steps:
        try:
            run.results[step.name] = step.run(rows, headers, run.tracker)
        except Exception as e:
            logger.warning(f"processor {step.name} failed: {e}")
            run.failed_steps.append(step.name)
            run.results[step.name] = step.empty()
    return run
