"""Progress events emitted during a sync run."""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class SyncProgressEvent(Enum):
    """Kinds of progress notifications."""

    SYNC_START = "sync_start"
    PAGE_LISTED = "page_listed"
    FILE_SYNCED = "file_synced"
    FILE_SKIPPED = "file_skipped"
    PROGRESS = "progress"
    SYNC_COMPLETE = "sync_complete"


@dataclass
class SyncProgressInfo:
    """Snapshot of a run's progress at the time of an event."""

    event: SyncProgressEvent
    files_synced: int = 0
    bytes_synced: int = 0
    files_listed: int = 0
    files_skipped: int = 0
    page: int = 0
    key: str = ""


class SyncProgressTracker:
    """Accumulates run counters and forwards events to a callback.

    Counters are guarded by a lock so workers can report concurrently.
    A :attr:`SyncProgressEvent.PROGRESS` event is emitted every
    ``interval`` successfully written files.
    """

    def __init__(
        self,
        callback: Optional[Callable[[SyncProgressInfo], None]] = None,
        interval: int = 100,
    ):
        self.callback = callback
        self.interval = interval
        self._lock = threading.Lock()
        self.files_synced = 0
        self.bytes_synced = 0
        self.files_listed = 0
        self.files_skipped = 0
        self.page = 0

    def _snapshot(self, event: SyncProgressEvent, key: str = "") -> SyncProgressInfo:
        return SyncProgressInfo(
            event=event,
            files_synced=self.files_synced,
            bytes_synced=self.bytes_synced,
            files_listed=self.files_listed,
            files_skipped=self.files_skipped,
            page=self.page,
            key=key,
        )

    def _emit(self, info: SyncProgressInfo) -> None:
        if self.callback is not None:
            self.callback(info)

    def on_start(self) -> None:
        self._emit(self._snapshot(SyncProgressEvent.SYNC_START))

    def on_page(self, item_count: int) -> None:
        with self._lock:
            self.page += 1
            self.files_listed += item_count
            info = self._snapshot(SyncProgressEvent.PAGE_LISTED)
        self._emit(info)

    def on_file_synced(self, key: str, size: int) -> None:
        with self._lock:
            self.files_synced += 1
            self.bytes_synced += size
            info = self._snapshot(SyncProgressEvent.FILE_SYNCED, key)
            milestone = None
            if self.interval and self.files_synced % self.interval == 0:
                milestone = self._snapshot(SyncProgressEvent.PROGRESS, key)
        self._emit(info)
        if milestone is not None:
            self._emit(milestone)

    def on_file_skipped(self, key: str) -> None:
        with self._lock:
            self.files_skipped += 1
            info = self._snapshot(SyncProgressEvent.FILE_SKIPPED, key)
        self._emit(info)

    def on_complete(self) -> None:
        self._emit(self._snapshot(SyncProgressEvent.SYNC_COMPLETE))
