from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

from calcsheet.models.processing_result import FileStat
from calcsheet.services.progress import ProgressTracker, is_tty_enabled


def _stat(status: str = "success", unclaimed: int = 0) -> FileStat:
    return FileStat("takeoff.xlsx", status, 10, 5, unclaimed, 0.1)


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    """ProgressTracker with and without a terminal."""

    def test_init_with_tty_enabled(self):
        with patch('calcsheet.services.progress.is_tty_enabled', return_value=True), \
             patch('calcsheet.services.progress.tqdm') as mock_tqdm:

            tracker = ProgressTracker(5, description="Test files")

            assert tracker.total_files == 5
            assert tracker.current_file == 0
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Test files",
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('calcsheet.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker(5)

            assert tracker.description == "Generating sheets"
            assert tracker.enabled is False
            assert tracker.pbar is None

    def test_start_and_finish_file_update_bar(self):
        mock_pbar = Mock()

        with patch('calcsheet.services.progress.is_tty_enabled', return_value=True), \
             patch('calcsheet.services.progress.tqdm', return_value=mock_pbar):

            tracker = ProgressTracker(3, description="Processing")
            tracker.start_file(Path("takeoff.xlsx"))
            assert tracker.current_file == 1
            mock_pbar.set_description.assert_called_with("Processing (takeoff.xlsx)")

            tracker.finish_file(_stat(unclaimed=2))
            mock_pbar.update.assert_called_once_with(1)
            mock_pbar.set_postfix.assert_called_once_with(success=1, failed=0, unclaimed=2)
            mock_pbar.set_description.assert_called_with("Processing")

    def test_counts_kept_without_tty(self):
        with patch('calcsheet.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker(3)
            tracker.start_file(Path("a.csv"))
            tracker.finish_file(_stat(unclaimed=1))
            tracker.finish_file(_stat(status="failed"))
            tracker.finish_file(_stat(unclaimed=3))
            tracker.close()
            assert (tracker.success, tracker.failed, tracker.unclaimed) == (2, 1, 4)

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()

        with patch('calcsheet.services.progress.is_tty_enabled', return_value=True), \
             patch('calcsheet.services.progress.tqdm', return_value=mock_pbar):

            with ProgressTracker(3) as tracker:
                assert isinstance(tracker, ProgressTracker)

            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
