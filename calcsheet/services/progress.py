from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

from ..models.processing_result import FileStat

"""Progress display over the input files of one run (tqdm, TTY only).

The bar postfix carries the running success/failed/unclaimed counts. Without
a terminal (CI, redirected output) no bar is created and the counts are
still kept, so log lines stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    def __init__(self, total_files: int, *, description: str = "Generating sheets") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.success = 0
        self.failed = 0
        self.unclaimed = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any = (
            tqdm(total=total_files, desc=description, unit="file", leave=True, position=0, ncols=80, ascii=True)
            if self.enabled
            else None
        )

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, stat: FileStat) -> None:
        """Count ``stat`` and advance the bar by one file."""
        if stat.status == "success":
            self.success += 1
        else:
            self.failed += 1
        self.unclaimed += stat.unclaimed_rows
        if self.pbar is not None:
            self.pbar.set_postfix(success=self.success, failed=self.failed, unclaimed=self.unclaimed)
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
