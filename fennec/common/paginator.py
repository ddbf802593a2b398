"""Lazy, restartable pagination over listing pages.

A Paginator turns a "fetch one listing page" coroutine into an async
iterator of item batches. Pages are fetched strictly one after another,
since the next cursor is only known once the previous page has been read.
The consumer cancels simply by no longer iterating; nothing is fetched ahead.

Termination rules, per fetched page:

1. The page has a next cursor: yield its items and advance.
2. No next cursor but at least one item: yield the items, then stop.
3. No next cursor and no items: stop without yielding.

A next cursor that points back at a page already visited counts as no next
cursor, so a "next" link to the current page can't loop forever.

Example::

    paginator = client.get_user_gallery("someone")
    async for submissions in paginator:
        ...
        if done:
            saved = paginator.cursor  # resume later from here
            break
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, Protocol, TypeVar
from urllib.parse import urljoin, urlsplit

from fennec.data_types import PaginationCursor

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class ListingPage(Protocol[T_co]):
    """What the paginator needs from an extracted listing page."""

    @property
    def items(self) -> Sequence[T_co]: ...

    @property
    def next_page(self) -> PaginationCursor | None: ...


class SearchResultsPage(Protocol[T_co]):
    """A search results page, which signals continuation with a flag."""

    @property
    def items(self) -> Sequence[T_co]: ...

    @property
    def more(self) -> bool: ...


def resolve_cursor(current: PaginationCursor, target: PaginationCursor) -> str:
    """Resolve ``target`` relative to the page it was found on."""
    return urljoin(current, target)


def cursor_key(cursor: PaginationCursor) -> str:
    """Identity of a cursor regardless of host or relative form."""
    parts = urlsplit(cursor)
    path = parts.path or "/"
    return f"{path}?{parts.query}" if parts.query else path


class Paginator(Generic[T]):
    """Async iterator over the item batches of a cursor-linked listing.

    Attributes:
        exhausted: True once the listing has ended; further iteration
            raises StopAsyncIteration without fetching.
        pages_fetched: Number of pages fetched so far.
    """

    def __init__(
        self,
        fetch_page: Callable[[PaginationCursor], Awaitable[ListingPage[T]]],
        start: PaginationCursor,
    ) -> None:
        """Initialize the paginator.

        Args:
            fetch_page: Fetches and extracts the page at a cursor.
            start: First cursor to fetch; may be a cursor saved earlier.
        """
        self._fetch_page = fetch_page
        self._cursor: PaginationCursor | None = start
        self._visited: set[str] = set()
        self.exhausted = False
        self.pages_fetched = 0

    @property
    def cursor(self) -> PaginationCursor | None:
        """The cursor the next iteration will fetch; None when exhausted."""
        return self._cursor

    def __aiter__(self) -> Paginator[T]:
        return self

    async def __anext__(self) -> list[T]:
        if self.exhausted or self._cursor is None:
            self._finish()
            raise StopAsyncIteration

        cursor = self._cursor
        self._visited.add(cursor_key(cursor))
        page = await self._fetch_page(cursor)
        self.pages_fetched += 1
        items = list(page.items)

        next_cursor = page.next_page
        if next_cursor:
            next_cursor = resolve_cursor(cursor, next_cursor)
            if cursor_key(next_cursor) in self._visited:
                logger.warning(
                    f"Next page {next_cursor} from {cursor} was already "
                    f"visited, ending listing"
                )
                next_cursor = None

        if next_cursor:
            self._cursor = next_cursor
            return items

        self._finish()
        if items:
            return items
        raise StopAsyncIteration

    def _finish(self) -> None:
        self._cursor = None
        self.exhausted = True

    async def collect(self) -> list[T]:
        """Drain the remaining pages into one flat list."""
        results: list[T] = []
        async for batch in self:
            results.extend(batch)
        return results


class SearchPaginator(Generic[T]):
    """Async iterator over search results, advancing a page number.

    Search pages carry no next link. Instead the results form has a "next
    page" control; its presence sets ``more`` and the paginator re-submits
    the search with the page number incremented. A page that claims more
    results but carries no items also ends the listing.
    """

    def __init__(
        self,
        fetch_page: Callable[[int], Awaitable[SearchResultsPage[T]]],
        start_page: int = 1,
    ) -> None:
        self._fetch_page = fetch_page
        self._page_number: int | None = start_page
        self.exhausted = False
        self.pages_fetched = 0

    @property
    def page_number(self) -> int | None:
        """The page number the next iteration will fetch; None when exhausted."""
        return self._page_number

    def __aiter__(self) -> SearchPaginator[T]:
        return self

    async def __anext__(self) -> list[T]:
        if self.exhausted or self._page_number is None:
            self._finish()
            raise StopAsyncIteration

        page = await self._fetch_page(self._page_number)
        self.pages_fetched += 1
        items = list(page.items)

        if page.more and items:
            self._page_number += 1
            return items

        self._finish()
        if items:
            return items
        raise StopAsyncIteration

    def _finish(self) -> None:
        self._page_number = None
        self.exhausted = True

    async def collect(self) -> list[T]:
        """Drain the remaining pages into one flat list."""
        results: list[T] = []
        async for batch in self:
            results.extend(batch)
        return results
