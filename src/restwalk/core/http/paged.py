"""
Paginated collection fetching.

The first page's headers decide how the rest of the collection is
retrieved:
- no usable metadata: the first page is the whole collection
- X-Next-Page only: walk pages one after another
- X-Total-Pages: request the remaining pages concurrently

Both the aggregated and the streaming variants deliver pages in
ascending page order.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections import deque
from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, TypeVar

import httpx

from .errors import InvalidArgumentError, UnknownStrategyError
from .headers import first_header_value
from .requestor import Requestor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest page size the service accepts
MAX_ITEMS_PER_PAGE = 100

TOTAL_PAGES_HEADER = "X-Total-Pages"
NEXT_PAGE_HEADER = "X-Next-Page"

DEFAULT_BUFFERED_PAGES = 3


class FetchStrategy(str, Enum):
    """How the pages after the first one are retrieved."""

    SINGLE_PAGE = "single_page"
    NEXT = "next"
    TOTAL = "total"


def select_strategy(headers: httpx.Headers) -> tuple[FetchStrategy, int | None]:
    """Pick the fetch strategy from a page's pagination headers.

    Returns:
        Strategy and, for TOTAL, the total page count
    """
    total_pages = first_header_value(headers, TOTAL_PAGES_HEADER)
    next_page = first_header_value(headers, NEXT_PAGE_HEADER)

    # X-Total-Pages is omitted on large collections, only X-Next-Page is left
    if total_pages == 0 and next_page > 1:
        return FetchStrategy.NEXT, None
    if total_pages in (0, 1):
        return FetchStrategy.SINGLE_PAGE, None
    return FetchStrategy.TOTAL, total_pages


def paged_url(url: str, page: int) -> str:
    """Append page size and page number query parameters to ``url``."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}per_page={MAX_ITEMS_PER_PAGE}&page={page}"


def _discard(tasks: deque[asyncio.Future[Any]]) -> None:
    """Cancel outstanding fetches and consume results nobody will read."""
    for task in tasks:
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            task.exception()


class PagedRequestor:
    """Fetch every page of a collection resource.

    Example:
        pages = PagedRequestor(requestor)
        issues = await pages.fetch_all("projects/1/issues", Issue)

        async for batch in pages.fetch_paged("projects/1/issues", Issue):
            ...
    """

    def __init__(self, requestor: Requestor, window_size: int | None = None):
        """Initialize paged requestor.

        Args:
            requestor: Rate-limited requestor shared with other callers
            window_size: Pages requested at once when the total is known
                         (default: number of CPUs)
        """
        self._requestor = requestor
        self.window_size = window_size or os.cpu_count() or 1

    async def fetch_all(self, url: str, item_type: type[T] = Any) -> list[T]:
        """Fetch all pages of ``url`` into one list.

        Args:
            url: Collection resource URL
            item_type: Type each item is validated into

        Returns:
            Items in page order, then in the order of each page

        Raises:
            RemoteError: If any page request fails; nothing partial is returned
        """
        page_type = list[item_type]
        items, headers = await self._requestor.get_with_headers(
            paged_url(url, 1), page_type
        )
        result: list[T] = list(items)

        strategy, total_pages = select_strategy(headers)
        logger.debug(
            "Fetching %s with %s strategy",
            url,
            strategy.value,
            extra={"url": url, "strategy": strategy.value},
        )

        if strategy is FetchStrategy.SINGLE_PAGE:
            return result
        if strategy is FetchStrategy.NEXT:
            return await self._fetch_next_pages(url, 2, page_type, result)
        if strategy is FetchStrategy.TOTAL:
            return await self._fetch_total_pages(url, total_pages, page_type, result)

        raise UnknownStrategyError(f"Unknown fetch strategy: {strategy}")

    async def _fetch_next_pages(
        self,
        url: str,
        next_page: int,
        page_type: Any,
        result: list[T],
    ) -> list[T]:
        while True:
            items, headers = await self._requestor.get_with_headers(
                paged_url(url, next_page), page_type
            )
            result.extend(items)
            next_page = first_header_value(headers, NEXT_PAGE_HEADER)
            if next_page <= 1:
                return result

    async def _fetch_total_pages(
        self,
        url: str,
        total_pages: int,
        page_type: Any,
        result: list[T],
    ) -> list[T]:
        urls = [paged_url(url, page) for page in range(2, total_pages + 1)]
        logger.debug(
            "Fetching %d remaining pages of %s, %d at a time",
            len(urls),
            url,
            self.window_size,
        )

        for start in range(0, len(urls), self.window_size):
            window = urls[start:start + self.window_size]
            pages = await self._gather(
                [self._requestor.get(u, page_type) for u in window]
            )
            for items in pages:
                result.extend(items)

        return result

    async def _gather(self, requests: list[Awaitable[list[T]]]) -> list[list[T]]:
        tasks = deque(asyncio.ensure_future(r) for r in requests)
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            _discard(tasks)
            raise

    def fetch_paged(
        self,
        url: str,
        item_type: type[T] = Any,
        buffered_pages: int = DEFAULT_BUFFERED_PAGES,
        first_page: int = 1,
    ) -> AsyncIterator[list[T]]:
        """Stream the pages of ``url`` as they arrive.

        Arguments are checked here, before anything is requested. The
        returned iterator is single use; each element is one page.

        Args:
            url: Collection resource URL
            item_type: Type each item is validated into
            buffered_pages: Page fetches kept in flight ahead of the consumer
                            when the total page count is known
            first_page: Page to start from

        Raises:
            InvalidArgumentError: If buffered_pages or first_page is below 1
        """
        if buffered_pages < 1:
            raise InvalidArgumentError(
                "buffered_pages", "buffered page count must be positive"
            )
        if first_page < 1:
            raise InvalidArgumentError(
                "first_page", "first page index must be positive"
            )

        return self._iter_pages(url, list[item_type], buffered_pages, first_page)

    async def _iter_pages(
        self,
        url: str,
        page_type: Any,
        buffered_pages: int,
        first_page: int,
    ) -> AsyncIterator[list[T]]:
        first_items, headers = await self._requestor.get_with_headers(
            paged_url(url, first_page), page_type
        )
        strategy, total_pages = select_strategy(headers)
        logger.debug(
            "Streaming %s with %s strategy",
            url,
            strategy.value,
            extra={"url": url, "strategy": strategy.value},
        )

        if strategy is FetchStrategy.SINGLE_PAGE:
            yield first_items
        elif strategy is FetchStrategy.NEXT:
            async with aclosing(
                self._iter_next_pages(url, page_type, first_items, headers)
            ) as pages:
                async for items in pages:
                    yield items
        elif strategy is FetchStrategy.TOTAL:
            async with aclosing(self._iter_total_pages(
                url, page_type, first_items, first_page, total_pages, buffered_pages
            )) as pages:
                async for items in pages:
                    yield items
        else:
            raise UnknownStrategyError(f"Unknown fetch strategy: {strategy}")

    async def _iter_next_pages(
        self,
        url: str,
        page_type: Any,
        items: list[T],
        headers: httpx.Headers,
    ) -> AsyncIterator[list[T]]:
        pending: deque[asyncio.Future[Any]] = deque()
        try:
            while True:
                next_page = first_header_value(headers, NEXT_PAGE_HEADER)
                if next_page > 1:
                    # The next page is requested while the current one is consumed
                    pending.append(asyncio.ensure_future(
                        self._requestor.get_with_headers(paged_url(url, next_page), page_type)
                    ))

                yield items

                if not pending:
                    return
                items, headers = await pending.popleft()
        finally:
            _discard(pending)

    async def _iter_total_pages(
        self,
        url: str,
        page_type: Any,
        first_items: list[T],
        first_page: int,
        total_pages: int,
        buffered_pages: int,
    ) -> AsyncIterator[list[T]]:
        loop = asyncio.get_running_loop()
        first: asyncio.Future[Any] = loop.create_future()
        first.set_result(first_items)

        queue: deque[asyncio.Future[Any]] = deque([first])
        next_page = first_page + 1
        try:
            while queue:
                current = queue.popleft()
                while len(queue) < buffered_pages and next_page <= total_pages:
                    queue.append(asyncio.ensure_future(
                        self._requestor.get(paged_url(url, next_page), page_type)
                    ))
                    next_page += 1

                yield await current
        finally:
            _discard(queue)
