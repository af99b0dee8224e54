"""Infinite-scroll controller for the listing explorer."""

import asyncio
import logging
from operator import attrgetter
from typing import Any, Awaitable, Callable, Hashable, List, Optional

from westudy.schemas.listing import ListingFilters

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 8
LOAD_ERROR_MESSAGE = "Não foi possível carregar os quartos. Tente novamente."

FetchPage = Callable[[ListingFilters, int, int], Awaitable[List[Any]]]


class ListingExplorer:
    """
    Accumulates listing pages for one filter configuration at a time.

    Every `apply_filters()` starts a new epoch; a response that comes back
    for an older epoch is dropped. `page` is the next page to fetch and a
    page shorter than `page_size` ends the list for the epoch.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int = DEFAULT_PAGE_SIZE,
        notify: Optional[Callable[[str], None]] = None,
        key: Callable[[Any], Hashable] = attrgetter("id"),
    ):
        self._fetch_page = fetch_page
        self.page_size = page_size
        self._notify = notify
        self._key = key

        self.filters = ListingFilters()
        self.items: List[Any] = []
        self.page = 1
        self.has_more = True
        self.is_loading = False
        self.is_loading_more = False
        self.epoch = 0
        self.fetch_count = 0
        self.error: Optional[Exception] = None
        self._seen = set()
        self._sentinel_visible = False

    @classmethod
    def from_client(cls, client, **kwargs) -> "ListingExplorer":
        """Drive a blocking WeStudyClient from a worker thread."""

        async def fetch(filters: ListingFilters, page: int, limit: int):
            return await asyncio.to_thread(client.list_listings, filters, page, limit)

        return cls(fetch, **kwargs)

    @property
    def is_busy(self) -> bool:
        return self.is_loading or self.is_loading_more

    @property
    def is_empty(self) -> bool:
        """Finished loading with nothing to show; a failed load is not empty."""
        return not self.is_busy and self.error is None and not self.items and not self.has_more

    async def apply_filters(self, filters: Optional[ListingFilters] = None) -> None:
        """Discard everything accumulated and load page 1 under `filters`."""
        self.epoch += 1
        epoch = self.epoch
        self.filters = filters or ListingFilters()
        self.items = []
        self._seen = set()
        self.page = 1
        self.has_more = True
        self.error = None
        self.is_loading = True
        self.is_loading_more = False
        self._sentinel_visible = False

        try:
            rows = await self._fetch(1)
        except Exception as exc:
            if epoch == self.epoch:
                self._fail(exc)
                self.is_loading = False
            return

        if epoch != self.epoch:
            logger.debug("Dropping page 1 of stale epoch %d", epoch)
            return
        self._accept(rows)
        self.is_loading = False

    async def load_more(self) -> bool:
        """
        Fetch the next page if nothing is in flight and the list has not ended.

        Returns True when a fetch was issued.
        """
        if self.is_busy or not self.has_more:
            return False
        self.is_loading_more = True
        epoch = self.epoch

        try:
            rows = await self._fetch(self.page)
        except Exception as exc:
            if epoch == self.epoch:
                self._fail(exc)
                self.is_loading_more = False
            return True

        if epoch != self.epoch:
            logger.debug("Dropping page of stale epoch %d", epoch)
            return True
        self._accept(rows)
        self.is_loading_more = False
        return True

    async def on_sentinel_visibility(self, visible: bool) -> bool:
        """Visibility signal of the last rendered card; fires once per hidden -> visible edge."""
        if not visible:
            self._sentinel_visible = False
            return False
        if self._sentinel_visible:
            return False
        self._sentinel_visible = True
        return await self.load_more()

    async def _fetch(self, page: int) -> List[Any]:
        self.fetch_count += 1
        return await self._fetch_page(self.filters, page, self.page_size)

    def _accept(self, rows: List[Any]) -> None:
        for row in rows:
            key = self._key(row)
            if key in self._seen:
                continue
            self._seen.add(key)
            self.items.append(row)
        self.page += 1
        self.has_more = len(rows) == self.page_size

    def _fail(self, exc: Exception) -> None:
        logger.warning("Loading listings failed: %s", exc)
        self.error = exc
        self.has_more = False
        if self._notify is not None:
            self._notify(LOAD_ERROR_MESSAGE)
