"""Per-object fetch and write operations."""

import logging
from pathlib import Path

from ..api import StoreClient
from ..exceptions import ObjectFetchOrWriteError
from ..filesystem import FilesystemClient
from ..models import ObjectDescriptor

logger = logging.getLogger(__name__)


class SyncOperations:
    """Downloads remote objects and writes them to the local tree."""

    def __init__(self, client: StoreClient, fs: FilesystemClient):
        """Initialize sync operations.

        Args:
            client: Object store client
            fs: Filesystem client
        """
        self.client = client
        self.fs = fs

    def materialize(self, descriptor: ObjectDescriptor, local_path: Path) -> int:
        """Fetch an object and write it to ``local_path``.

        The whole object is buffered in memory before anything is written,
        and any existing file at ``local_path`` is replaced.

        Args:
            descriptor: Remote object to fetch
            local_path: Destination path (already checked against traversal)

        Returns:
            Number of bytes written

        Raises:
            ObjectFetchOrWriteError: If fetching or writing fails
        """
        key = descriptor.key
        try:
            self.fs.mkdir_all(local_path.parent)
        except OSError as e:
            raise ObjectFetchOrWriteError(
                key, f"Failed to create directory for {key}: {e}"
            ) from e

        try:
            content = self.client.get_object(key)
        except Exception as e:
            raise ObjectFetchOrWriteError(key, f"Failed to fetch {key}: {e}") from e

        if content is None:
            raise ObjectFetchOrWriteError(key, f"Empty response body for {key}")

        try:
            self.fs.write_file(local_path, content)
        except OSError as e:
            raise ObjectFetchOrWriteError(key, f"Failed to write {key}: {e}") from e

        logger.debug("Wrote %s (%d bytes)", local_path, len(content))
        return len(content)
