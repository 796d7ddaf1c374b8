from __future__ import annotations

import logging

import pytest

from calcsheet.processors.pipeline import PROCESSOR_PIPELINE, PipelineStep, run_pipeline, validate_pipeline
from calcsheet.processors.tracker import RowClaimTracker


def test_pipeline_claims_known_rows(headers, sample_rows):
    run = run_pipeline(sample_rows, headers)
    assert run.failed_steps == []
    assert [i.particulars for i in run["demolition"]["Demo slab on grade"]] == ['Demo SOG 4" thick'] * 2
    assert len(run["excavation"]) == 1
    assert len(run["soldier_piles"]) == 1
    assert [line.row_index for line in run.tracker.unused_rows(sample_rows)] == [6]


def test_failing_step_is_contained(headers, sample_rows, caplog):
    def boom(rows, headers, tracker):
        raise RuntimeError("kaboom")

    steps = (PipelineStep("ok", lambda r, h, t: ["x"]), PipelineStep("boom", boom, dict))
    with caplog.at_level(logging.WARNING):
        run = run_pipeline(sample_rows, headers, steps=steps)
    assert run.failed_steps == ["boom"]
    assert run["ok"] == ["x"]
    assert run["boom"] == {}
    assert any("processor boom failed: kaboom" in r.getMessage() for r in caplog.records)


def test_missing_headers_yield_empty_results(sample_rows):
    run = run_pipeline(sample_rows, ["Page", "Description"])
    assert run.failed_steps == []
    assert run["excavation"] == []
    assert all(not v for v in run["demolition"].values())


def test_skip_claimed_step_sees_only_free_rows(headers, sample_rows):
    seen = []

    def record(rows, hdrs, tracker):
        seen.extend(i for i in range(len(rows)) if not tracker.is_used(i))
        return []

    tracker = RowClaimTracker()
    tracker.mark_multiple_used([0, 1, 2])
    run_pipeline(sample_rows, headers, steps=(PipelineStep("rest", record, skip_claimed=True),), tracker=tracker)
    assert seen == [3, 4, 5, 6]


def _noop(rows, hdrs, tracker):
    return []


def test_validate_pipeline_rules():
    validate_pipeline(PROCESSOR_PIPELINE)
    with pytest.raises(ValueError, match="duplicate"):
        validate_pipeline((PipelineStep("a", _noop), PipelineStep("a", _noop)))
    with pytest.raises(ValueError, match="after a skip_claimed step"):
        validate_pipeline((PipelineStep("late", _noop, skip_claimed=True), PipelineStep("claims", _noop)))


def test_tracker_stats():
    tracker = RowClaimTracker()
    tracker.mark_multiple_used([1, 1, 3, True])
    assert tracker.stats(5).used == 2
    assert len(tracker) == 2
    tracker.reset()
    assert tracker.used_indices == frozenset()
