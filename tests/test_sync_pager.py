"""Unit tests for PageCursor."""

from unittest.mock import Mock

import pytest

from srcmirror.exceptions import ListingError, StoreAPIError
from srcmirror.models import ListPage, ObjectDescriptor
from srcmirror.sync.pager import PageCursor


def _page(keys, next_token=None):
    return ListPage(
        items=[ObjectDescriptor(key=k, size=1) for k in keys],
        next_token=next_token,
    )


class TestPageCursor:
    """Tests for PageCursor.next_page."""

    def test_single_page(self):
        """Test a listing that fits in one page."""
        client = Mock()
        client.list_objects.return_value = _page(["p/a", "p/b"])

        cursor = PageCursor(client, "p/")
        items, done = cursor.next_page()

        assert [d.key for d in items] == ["p/a", "p/b"]
        assert done is True
        assert cursor.done is True
        client.list_objects.assert_called_once_with(
            "p/", continuation_token=None, max_keys=1000
        )

    def test_follows_continuation_token(self):
        """Test that each request passes the previous page's token."""
        client = Mock()
        client.list_objects.side_effect = [
            _page(["p/a"], next_token="t1"),
            _page(["p/b"], next_token="t2"),
            _page(["p/c"]),
        ]

        cursor = PageCursor(client, "p/", page_size=1)
        results = [cursor.next_page(), cursor.next_page(), cursor.next_page()]

        assert [done for _, done in results] == [False, False, True]
        tokens = [c.kwargs["continuation_token"] for c in client.list_objects.call_args_list]
        assert tokens == [None, "t1", "t2"]
        assert cursor.pages_fetched == 3

    def test_next_page_after_done_does_not_call_store(self):
        """Test that an exhausted cursor returns an empty final page."""
        client = Mock()
        client.list_objects.return_value = _page(["p/a"])

        cursor = PageCursor(client, "p/")
        cursor.next_page()

        assert cursor.next_page() == ([], True)
        assert client.list_objects.call_count == 1

    def test_reset_restarts_from_first_page(self):
        """Test that reset starts over without a token."""
        client = Mock()
        client.list_objects.side_effect = [
            _page(["p/a"], next_token="t1"),
            _page(["p/a"], next_token="t1"),
        ]

        cursor = PageCursor(client, "p/")
        cursor.next_page()
        cursor.reset()
        cursor.next_page()

        assert client.list_objects.call_args_list[1].kwargs["continuation_token"] is None
        assert cursor.pages_fetched == 1

    def test_store_error_becomes_listing_error(self):
        """Test that a failing page raises ListingError."""
        client = Mock()
        client.list_objects.side_effect = [
            _page(["p/a"], next_token="t1"),
            StoreAPIError("throttled"),
        ]

        cursor = PageCursor(client, "p/")
        cursor.next_page()

        with pytest.raises(ListingError, match="page 2"):
            cursor.next_page()

    def test_invalid_page_size(self):
        """Test that page_size must be positive."""
        with pytest.raises(ValueError):
            PageCursor(Mock(), "p/", page_size=0)


class TestIteration:
    """Tests for the lazy generators."""

    def test_iter_objects_across_pages(self, store_factory, objects_factory):
        """Test that 2,500 objects come back over three 1,000-key pages."""
        store = store_factory(objects_factory("acme/web/main/", 2500))

        cursor = PageCursor(store, "acme/web/main/", page_size=1000)
        keys = [d.key for d in cursor.iter_objects()]

        assert len(keys) == 2500
        assert len(set(keys)) == 2500
        assert len(store.list_calls) == 3
        assert [c[1] for c in store.list_calls] == [None, "1000", "2000"]

    def test_iter_objects_is_lazy(self):
        """Test that pages are only requested as the generator advances."""
        client = Mock()
        client.list_objects.side_effect = [
            _page(["p/a"], next_token="t1"),
            _page(["p/b"]),
        ]

        iterator = PageCursor(client, "p/").iter_objects()
        assert client.list_objects.call_count == 0

        assert next(iterator).key == "p/a"
        assert client.list_objects.call_count == 1

    def test_iter_pages_preserves_store_order(self):
        """Test that keys keep the store's ordering."""
        client = Mock()
        client.list_objects.side_effect = [
            _page(["p/z", "p/a"], next_token="t1"),
            _page(["p/m"]),
        ]

        pages = list(PageCursor(client, "p/").iter_pages())

        assert [[d.key for d in page] for page in pages] == [["p/z", "p/a"], ["p/m"]]
