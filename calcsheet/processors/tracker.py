from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

"""Row claim tracking shared by the processor pipeline.

Processors mark the 0-based data rows they turn into items. Steps flagged
``skip_claimed`` in the pipeline consult the tracker and ignore rows an
earlier step already took; after the run, the rows nobody claimed are
reported.
"""

__all__ = [
    "ClaimStats",
    "UnclaimedLine",
    "RowClaimTracker",
]


@dataclass(frozen=True)
class ClaimStats:
    used: int
    unused: int
    total: int


@dataclass(frozen=True)
class UnclaimedLine:
    row_index: int
    row: Sequence[Any]


class RowClaimTracker:
    def __init__(self) -> None:
        self._used: set[int] = set()

    def mark_used(self, row_index: int) -> None:
        if isinstance(row_index, int) and not isinstance(row_index, bool):
            self._used.add(row_index)

    def mark_multiple_used(self, indices: Iterable[int]) -> None:
        for i in indices:
            self.mark_used(i)

    def is_used(self, row_index: int) -> bool:
        return row_index in self._used

    @property
    def used_indices(self) -> frozenset[int]:
        return frozenset(self._used)

    def unused_rows(self, rows: Sequence[Sequence[Any]]) -> list[UnclaimedLine]:
        """Non-empty rows that no processor claimed, in input order."""
        unused: list[UnclaimedLine] = []
        for index, row in enumerate(rows or []):
            if index in self._used:
                continue
            if any(cell is not None and cell != "" for cell in row):
                unused.append(UnclaimedLine(row_index=index, row=row))
        return unused

    def reset(self) -> None:
        self._used.clear()

    def stats(self, total_rows: int) -> ClaimStats:
        return ClaimStats(used=len(self._used), unused=total_rows - len(self._used), total=total_rows)

    def __len__(self) -> int:
        return len(self._used)
