"""Paginated listing of remote keys under a prefix."""

import logging
from collections.abc import Generator
from typing import Optional

from ..api import StoreClient
from ..exceptions import ListingError
from ..models import ObjectDescriptor
from ..utils import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


class PageCursor:
    """Walks the pages of a remote listing one request at a time.

    The cursor can be restarted from scratch with :meth:`reset` but cannot
    resume in the middle of a page.

    Examples:
        >>> cursor = PageCursor(client, "acme/web/main/")
        >>> items, done = cursor.next_page()
        >>> while not done:
        ...     items, done = cursor.next_page()
    """

    def __init__(
        self,
        client: StoreClient,
        prefix: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize the cursor.

        Args:
            client: Store client to list with
            prefix: Key prefix to enumerate
            page_size: Maximum number of keys per list request
        """
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.client = client
        self.prefix = prefix
        self.page_size = page_size
        self.reset()

    def reset(self) -> None:
        """Restart the listing from the first page."""
        self._token: Optional[str] = None
        self._done = False
        self.pages_fetched = 0

    @property
    def done(self) -> bool:
        return self._done

    def next_page(self) -> tuple[list[ObjectDescriptor], bool]:
        """Fetch the next page.

        Returns:
            Tuple of (items, done). ``done`` is True once the store reports
            no further pages. Once done, further calls return ``([], True)``
            without contacting the store.

        Raises:
            ListingError: If the list request fails
        """
        if self._done:
            return [], True

        try:
            page = self.client.list_objects(
                self.prefix,
                continuation_token=self._token,
                max_keys=self.page_size,
            )
        except Exception as e:
            raise ListingError(
                f"Failed to list page {self.pages_fetched + 1} "
                f"of {self.prefix}: {e}"
            ) from e

        self.pages_fetched += 1
        self._token = page.next_token
        self._done = not page.next_token

        logger.debug(
            "Page %d of %s: %d object(s), done=%s",
            self.pages_fetched,
            self.prefix,
            len(page.items),
            self._done,
        )
        return page.items, self._done

    def iter_pages(self) -> Generator[list[ObjectDescriptor], None, None]:
        """Lazily yield pages until the listing is exhausted."""
        while not self.done:
            items, _ = self.next_page()
            yield items

    def iter_objects(self) -> Generator[ObjectDescriptor, None, None]:
        """Lazily yield every descriptor in store order."""
        for items in self.iter_pages():
            yield from items
