"""CLI progress display for sync operations.

This module provides a Rich-based progress display that works with
the SyncProgressTracker from the sync engine.
"""

from typing import Optional

from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .utils import format_size


class SyncProgressDisplay:
    """Rich-based progress display for sync runs.

    The total number of objects is unknown until the last page has been
    listed, so the display shows running counts instead of a percentage:
    - Listed: keys seen so far across pages
    - Synced: files written and bytes transferred
    - Skipped: files that failed
    """

    def __init__(self) -> None:
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def create_tracker(self, interval: int = 100) -> SyncProgressTracker:
        """Create a SyncProgressTracker that updates this display."""
        return SyncProgressTracker(callback=self._handle_event, interval=interval)

    def _format_counts(self, info: SyncProgressInfo) -> str:
        """Format counters like "12 synced / 40 listed, 1.5 MB, 0 skipped"."""
        return (
            f"{info.files_synced} synced / {info.files_listed} listed, "
            f"{format_size(info.bytes_synced)}, "
            f"{info.files_skipped} skipped"
        )

    def _handle_event(self, info: SyncProgressInfo) -> None:
        if self._progress is None or self._task is None:
            return

        if info.event == SyncProgressEvent.PAGE_LISTED:
            self._progress.update(
                self._task,
                description=f"Syncing (page {info.page})",
                counts=self._format_counts(info),
            )
        elif info.event in (
            SyncProgressEvent.FILE_SYNCED,
            SyncProgressEvent.FILE_SKIPPED,
        ):
            self._progress.update(
                self._task,
                completed=info.files_synced,
                counts=self._format_counts(info),
            )
        elif info.event == SyncProgressEvent.SYNC_COMPLETE:
            self._progress.update(
                self._task,
                description="Sync complete",
                counts=self._format_counts(info),
            )

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TextColumn("[cyan]{task.fields[counts]}"),
            TimeElapsedColumn(),
            refresh_per_second=4,
            transient=False,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task(
            "Listing remote objects...",
            total=None,
            counts="0 synced / 0 listed, 0 B, 0 skipped",
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None


def run_sync_with_progress(engine, request, cancel_event=None, show_progress=True):
    """Run a sync with a Rich progress display.

    Args:
        engine: SyncEngine instance
        request: SyncRequest to run
        cancel_event: Optional cancellation signal
        show_progress: If False, run without any display

    Returns:
        SyncResult of the run
    """
    if not show_progress:
        return engine.sync(request, cancel_event=cancel_event)

    with SyncProgressDisplay() as display:
        tracker = display.create_tracker(interval=engine.progress_interval)
        return engine.sync(
            request, cancel_event=cancel_event, progress_tracker=tracker
        )
