"""Sync engine for srcmirror - one-way mirroring of a remote prefix."""

from .engine import SyncEngine
from .filters import KeyFilter
from .operations import SyncOperations
from .pager import PageCursor
from .paths import relative_key, resolve_target_path
from .progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .request import validate_request
from .target import prepare_target

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "PageCursor",
    "KeyFilter",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
    "prepare_target",
    "relative_key",
    "resolve_target_path",
    "validate_request",
]
