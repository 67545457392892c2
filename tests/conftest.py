"""Shared fixtures for srcmirror tests."""

import threading
from typing import Optional

import pytest

from srcmirror.exceptions import StoreAPIError, StoreNotFoundError
from srcmirror.models import ListPage, ObjectDescriptor


class FakeStore:
    """In-memory object store with S3-like pagination.

    Continuation tokens are opaque strings holding the next start index.
    """

    def __init__(
        self,
        objects: Optional[dict[str, bytes]] = None,
        fail_keys: tuple[str, ...] = (),
        fail_on_list_call: Optional[int] = None,
    ):
        self.bucket = "test-bucket"
        self.objects = dict(objects or {})
        self.fail_keys = set(fail_keys)
        self.fail_on_list_call = fail_on_list_call
        self.list_calls: list[tuple[str, Optional[str], int]] = []
        self.get_calls: list[str] = []
        self._lock = threading.Lock()

    def list_objects(self, prefix, continuation_token=None, max_keys=1000):
        self.list_calls.append((prefix, continuation_token, max_keys))
        if self.fail_on_list_call == len(self.list_calls):
            raise StoreAPIError("Listing failed: connection reset")

        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(continuation_token) if continuation_token else 0
        end = start + max_keys
        items = [ObjectDescriptor(key=k, size=len(self.objects[k])) for k in keys[start:end]]
        next_token = str(end) if end < len(keys) else None
        return ListPage(items=items, next_token=next_token)

    def get_object(self, key):
        with self._lock:
            self.get_calls.append(key)
        if key in self.fail_keys:
            raise StoreNotFoundError(f"Download of {key} failed: NoSuchKey")
        return self.objects[key]


def make_objects(prefix: str, count: int) -> dict[str, bytes]:
    """Build ``count`` small objects under ``prefix``."""
    return {
        f"{prefix}src/file_{i:05d}.txt": f"content {i}\n".encode()
        for i in range(count)
    }


@pytest.fixture
def fake_store():
    """A store holding a small source tree for acme/web/main."""
    return FakeStore(
        {
            "acme/web/main/README.md": b"# web\n",
            "acme/web/main/app/": b"",
            "acme/web/main/app/main.py": b"print('hi')\n",
            "acme/web/main/app/lib/util.py": b"def f():\n    return 1\n",
            "acme/web/dev/app/main.py": b"dev branch\n",
        }
    )


@pytest.fixture
def store_factory():
    """Return the FakeStore class for tests that build their own store."""
    return FakeStore


@pytest.fixture
def objects_factory():
    """Return a helper building N objects under a prefix."""
    return make_objects


@pytest.fixture
def mount_root(tmp_path):
    root = tmp_path / "mnt"
    root.mkdir()
    return root
