"""Data models for sync requests, remote objects and results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .utils import DEFAULT_BRANCH, format_megabytes


@dataclass(frozen=True)
class SyncRequest:
    """A validated, normalized sync request.

    Build instances with :func:`srcmirror.sync.request.validate_request`
    rather than directly, so defaults and validation are applied once.
    """

    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH
    clean: bool = False
    include_paths: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    @property
    def prefix(self) -> str:
        """Remote key prefix for this request (always ends with ``/``)."""
        return f"{self.owner}/{self.repo}/{self.branch}/"

    @property
    def target_parts(self) -> tuple[str, ...]:
        """Path segments of the target directory below the mount root.

        A branch such as ``feature/login`` contributes two segments.
        """
        return (self.owner, self.repo, *self.branch.split("/"))


@dataclass(frozen=True)
class ObjectDescriptor:
    """A single object listed under a remote prefix."""

    key: str
    """Full object key including the prefix"""

    size: int = 0
    """Object size in bytes as reported by the listing"""

    etag: Optional[str] = None

    last_modified: Optional[datetime] = None

    @property
    def is_directory_marker(self) -> bool:
        """True for zero-content "folder" keys that end with ``/``."""
        return self.key.endswith("/")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectDescriptor":
        """Create a descriptor from an S3 ``Contents`` entry.

        Args:
            data: Dictionary with at least a ``Key`` field

        Returns:
            ObjectDescriptor instance
        """
        etag = data.get("ETag")
        return cls(
            key=data["Key"],
            size=int(data.get("Size", 0) or 0),
            etag=etag.strip('"') if etag else None,
            last_modified=data.get("LastModified"),
        )


@dataclass
class ListPage:
    """One page of a remote listing."""

    items: list[ObjectDescriptor] = field(default_factory=list)
    next_token: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_token)

    @classmethod
    def from_api_response(cls, response: dict[str, Any]) -> "ListPage":
        """Create a page from a ``list_objects_v2`` response.

        ``NextContinuationToken`` is only trusted when ``IsTruncated`` is not
        explicitly false.
        """
        items = [ObjectDescriptor.from_dict(obj) for obj in response.get("Contents", [])]
        next_token = response.get("NextContinuationToken")
        if response.get("IsTruncated") is False:
            next_token = None
        return cls(items=items, next_token=next_token or None)


@dataclass(frozen=True)
class SkippedObject:
    """An object that could not be materialized."""

    key: str
    error: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "error": self.error}


@dataclass
class SyncResult:
    """Outcome of one sync run.

    A failed run only carries ``error``; a successful or cancelled run
    carries the counts and the target directory.
    """

    success: bool
    owner: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    files_synced: int = 0
    total_size_bytes: int = 0
    target_dir: Optional[str] = None
    files_filtered: int = 0
    skipped: list[SkippedObject] = field(default_factory=list)
    cancelled: bool = False
    error: Optional[str] = None

    @property
    def total_size_mb(self) -> str:
        """Total written size in megabytes, formatted with two decimals."""
        return format_megabytes(self.total_size_bytes)

    @property
    def files_skipped(self) -> int:
        return len(self.skipped)

    @classmethod
    def failure(cls, message: str) -> "SyncResult":
        """Create a failed result carrying only an error message."""
        return cls(success=False, error=message)

    def to_response(self) -> dict[str, Any]:
        """Convert to the wire response of the invocation contract.

        Returns:
            ``{"success": False, "error": ...}`` for failures, otherwise the
            full camelCase summary
        """
        if not self.success and not self.cancelled:
            return {"success": False, "error": self.error or "Unknown error"}

        response: dict[str, Any] = {
            "success": self.success,
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
            "filesSynced": self.files_synced,
            "totalSizeMB": self.total_size_mb,
            "targetDir": self.target_dir,
            "filesSkipped": self.files_skipped,
            "filesFiltered": self.files_filtered,
            "skipped": [s.to_dict() for s in self.skipped],
        }
        if self.cancelled:
            response["cancelled"] = True
        return response
