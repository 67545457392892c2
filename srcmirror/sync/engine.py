"""Core sync engine mirroring a remote prefix onto the local mount."""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..api import S3StoreClient, StoreClient
from ..config import Config
from ..config import config as default_config
from ..exceptions import ObjectFetchOrWriteError, SyncError, UnexpectedError
from ..filesystem import FilesystemClient, LocalFilesystem
from ..models import ObjectDescriptor, SkippedObject, SyncRequest, SyncResult
from ..utils import DEFAULT_PAGE_SIZE, PROGRESS_INTERVAL, format_megabytes
from .filters import KeyFilter
from .operations import SyncOperations
from .pager import PageCursor
from .paths import relative_key, resolve_target_path
from .progress import SyncProgressTracker
from .request import validate_request
from .target import prepare_target

logger = logging.getLogger(__name__)


@dataclass
class _RunStats:
    """Counters for one run. Only the orchestrating thread writes to it."""

    files_synced: int = 0
    total_size_bytes: int = 0
    files_filtered: int = 0
    skipped: list[SkippedObject] = field(default_factory=list)
    cancelled: bool = False


class SyncEngine:
    """Mirrors ``{owner}/{repo}/{branch}/`` from the store to the mount.

    Concurrent runs against the same owner/repo/branch are not safe: they can
    interleave deletes and writes. Callers must allow at most one in-flight
    sync per prefix. Runs for different prefixes touch disjoint directories
    and may run in parallel.
    """

    def __init__(
        self,
        client: StoreClient,
        mount_root: Union[str, Path],
        fs: Optional[FilesystemClient] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_workers: int = 1,
        progress_interval: int = PROGRESS_INTERVAL,
    ):
        """Initialize sync engine.

        Args:
            client: Object store client
            mount_root: Root directory of the local mirror
            fs: Filesystem client (defaults to the local disk)
            page_size: Number of keys per list request
            max_workers: Number of objects fetched/written in parallel
            progress_interval: Emit a progress event every N written files
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.mount_root = Path(mount_root)
        self.fs = fs or LocalFilesystem()
        self.page_size = page_size
        self.max_workers = max_workers
        self.progress_interval = progress_interval
        self.operations = SyncOperations(client, self.fs)

    @classmethod
    def from_config(
        cls, cfg: Optional[Config] = None, **overrides: Any
    ) -> "SyncEngine":
        """Build an engine with an S3 client from configuration.

        Args:
            cfg: Configuration to read (defaults to the global config)
            **overrides: Keyword arguments overriding configured values

        Returns:
            Configured SyncEngine
        """
        cfg = cfg or default_config
        client = overrides.pop("client", None) or S3StoreClient(
            bucket=cfg.require_bucket(),
            region=cfg.region,
            endpoint_url=cfg.endpoint_url,
        )
        kwargs: dict[str, Any] = {
            "mount_root": cfg.mount_root,
            "page_size": cfg.page_size,
            "max_workers": cfg.max_workers,
        }
        kwargs.update(overrides)
        return cls(client, **kwargs)

    def target_dir_for(self, request: SyncRequest) -> Path:
        """Local directory that mirrors ``request.prefix``."""
        return self.mount_root.joinpath(*request.target_parts)

    def sync(
        self,
        request: Union[SyncRequest, Mapping[str, Any]],
        cancel_event: Optional[threading.Event] = None,
        progress_tracker: Optional[SyncProgressTracker] = None,
    ) -> SyncResult:
        """Run one sync.

        Never raises for run errors: validation, preparation, listing and
        unexpected errors all come back as a failed SyncResult. Per-object
        failures are recorded in ``SyncResult.skipped``.

        Args:
            request: Validated request or raw request fields
            cancel_event: When set, no further list or fetch calls are made
                and a partial, cancelled result is returned
            progress_tracker: Optional tracker receiving progress events

        Returns:
            SyncResult describing the run

        Examples:
            >>> engine = SyncEngine(S3StoreClient("sources"), "/mnt/source")
            >>> result = engine.sync({"owner": "acme", "repo": "web"})
            >>> print(f"Synced {result.files_synced} files")
        """
        start_time = time.time()
        tracker = progress_tracker or SyncProgressTracker(
            interval=self.progress_interval
        )
        cancel_event = cancel_event or threading.Event()

        try:
            if not isinstance(request, SyncRequest):
                request = validate_request(request)

            target_dir = self.target_dir_for(request)
            key_filter = KeyFilter(request.include_paths, request.exclude_patterns)

            logger.info(
                "Syncing %s -> %s (clean=%s)", request.prefix, target_dir, request.clean
            )
            if cancel_event.is_set():
                # Cancelled before start: the target is left untouched
                stats = _RunStats(cancelled=True)
            else:
                prepare_target(self.fs, target_dir, request.clean)

                tracker.on_start()
                stats = self._sync_pages(
                    request, target_dir, key_filter, tracker, cancel_event
                )
                tracker.on_complete()

        except SyncError as e:
            logger.error("Sync failed: %s", e)
            return SyncResult.failure(str(e))
        except Exception as e:
            logger.exception("Unexpected error during sync")
            wrapped = UnexpectedError(str(e) or e.__class__.__name__)
            return SyncResult.failure(str(wrapped))

        elapsed = time.time() - start_time
        logger.info(
            "%s: %d files, %s MB, %d skipped, %d filtered in %.2fs",
            "Cancelled" if stats.cancelled else "Completed",
            stats.files_synced,
            format_megabytes(stats.total_size_bytes),
            len(stats.skipped),
            stats.files_filtered,
            elapsed,
        )

        return SyncResult(
            success=not stats.cancelled,
            owner=request.owner,
            repo=request.repo,
            branch=request.branch,
            files_synced=stats.files_synced,
            total_size_bytes=stats.total_size_bytes,
            target_dir=str(target_dir),
            files_filtered=stats.files_filtered,
            skipped=stats.skipped,
            cancelled=stats.cancelled,
        )

    def _sync_pages(
        self,
        request: SyncRequest,
        target_dir: Path,
        key_filter: KeyFilter,
        tracker: SyncProgressTracker,
        cancel_event: threading.Event,
    ) -> _RunStats:
        """List pages one at a time and materialize each page's objects.

        Args:
            request: Validated request
            target_dir: Local target directory
            key_filter: Include/exclude filter
            tracker: Progress tracker
            cancel_event: Cancellation signal

        Returns:
            Accumulated run statistics
        """
        stats = _RunStats()
        cursor = PageCursor(self.client, request.prefix, page_size=self.page_size)

        executor: Optional[ThreadPoolExecutor] = None
        if self.max_workers > 1:
            executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="srcmirror"
            )

        try:
            done = False
            while not done:
                if cancel_event.is_set():
                    stats.cancelled = True
                    break

                items, done = cursor.next_page()
                tracker.on_page(len(items))
                logger.debug(
                    "Page %d: %d object(s)", cursor.pages_fetched, len(items)
                )

                batch = self._select_batch(
                    items, request.prefix, key_filter, stats, tracker
                )
                if executor is not None and len(batch) > 1:
                    self._materialize_parallel(
                        executor, batch, target_dir, stats, tracker, cancel_event
                    )
                else:
                    self._materialize_sequential(
                        batch, target_dir, stats, tracker, cancel_event
                    )

                if cancel_event.is_set():
                    stats.cancelled = True
                    break

        except KeyboardInterrupt:
            logger.warning("Sync cancelled by user")
            cancel_event.set()
            stats.cancelled = True
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        return stats

    def _select_batch(
        self,
        items: list[ObjectDescriptor],
        prefix: str,
        key_filter: KeyFilter,
        stats: _RunStats,
        tracker: SyncProgressTracker,
    ) -> list[tuple[ObjectDescriptor, str]]:
        """Drop directory markers and filtered keys from a page.

        Returns:
            List of (descriptor, relative_key) tuples to materialize
        """
        batch = []
        for descriptor in items:
            if descriptor.is_directory_marker:
                continue

            try:
                rel_key = relative_key(descriptor.key, prefix)
            except ObjectFetchOrWriteError as e:
                self._record_skip(stats, tracker, e)
                continue

            if key_filter.is_active and not key_filter.matches(rel_key):
                stats.files_filtered += 1
                if stats.files_filtered <= 10:
                    logger.debug("Filtered: %s", rel_key)
                continue

            batch.append((descriptor, rel_key))
        return batch

    def _materialize_one(
        self, descriptor: ObjectDescriptor, rel_key: str, target_dir: Path
    ) -> int:
        local_path = resolve_target_path(target_dir, rel_key, descriptor.key)
        return self.operations.materialize(descriptor, local_path)

    def _materialize_sequential(
        self,
        batch: list[tuple[ObjectDescriptor, str]],
        target_dir: Path,
        stats: _RunStats,
        tracker: SyncProgressTracker,
        cancel_event: threading.Event,
    ) -> None:
        for descriptor, rel_key in batch:
            if cancel_event.is_set():
                return
            try:
                size = self._materialize_one(descriptor, rel_key, target_dir)
            except ObjectFetchOrWriteError as e:
                self._record_skip(stats, tracker, e)
            else:
                self._record_success(stats, tracker, descriptor.key, size)

    def _materialize_parallel(
        self,
        executor: ThreadPoolExecutor,
        batch: list[tuple[ObjectDescriptor, str]],
        target_dir: Path,
        stats: _RunStats,
        tracker: SyncProgressTracker,
        cancel_event: threading.Event,
    ) -> None:
        """Materialize a page with the worker pool.

        Workers only fetch and write; results are aggregated here, in the
        calling thread, as futures complete.
        """
        logger.debug(
            "Materializing %d object(s) with %d workers", len(batch), self.max_workers
        )

        def run(descriptor: ObjectDescriptor, rel_key: str) -> Optional[int]:
            if cancel_event.is_set():
                return None
            return self._materialize_one(descriptor, rel_key, target_dir)

        futures: dict[Future, ObjectDescriptor] = {
            executor.submit(run, descriptor, rel_key): descriptor
            for descriptor, rel_key in batch
        }

        try:
            for future in as_completed(futures):
                descriptor = futures[future]
                try:
                    size = future.result()
                except ObjectFetchOrWriteError as e:
                    self._record_skip(stats, tracker, e)
                    continue
                if size is not None:
                    self._record_success(stats, tracker, descriptor.key, size)
        except BaseException:
            cancel_event.set()
            for future in futures:
                future.cancel()
            raise

    def _record_success(
        self, stats: _RunStats, tracker: SyncProgressTracker, key: str, size: int
    ) -> None:
        stats.files_synced += 1
        stats.total_size_bytes += size
        tracker.on_file_synced(key, size)
        if self.progress_interval and stats.files_synced % self.progress_interval == 0:
            logger.info("Progress: %d files synced...", stats.files_synced)

    def _record_skip(
        self,
        stats: _RunStats,
        tracker: SyncProgressTracker,
        error: ObjectFetchOrWriteError,
    ) -> None:
        logger.warning("Failed to sync %s: %s", error.key, error)
        stats.skipped.append(SkippedObject(key=error.key, error=str(error)))
        tracker.on_file_skipped(error.key)
