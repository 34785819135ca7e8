"""Cursor pagination helpers for list endpoints."""

import logging
from typing import Any, Awaitable, Callable, NamedTuple, Optional, Union

from ..constants import DEFAULT_MAX_PAGES

logger = logging.getLogger(__name__)

# A missing or empty cursor means there are no more pages
PaginationCursor = Optional[str]


class Page(NamedTuple):
    """One page of a list endpoint."""

    items: list[Any]
    next_cursor: PaginationCursor = None


FetchPage = Callable[[PaginationCursor], Awaitable[Union[Page, tuple]]]


async def collect_all(fetch_page: FetchPage, max_pages: int = DEFAULT_MAX_PAGES) -> list[Any]:
    """Fetch pages until the cursor runs out or ``max_pages`` is reached.

    The page cap guards against endpoints that keep returning a cursor, so
    ``fetch_page`` is never awaited more than ``max_pages`` times. Hitting the
    cap returns what was collected so far instead of raising. Errors raised
    by ``fetch_page`` propagate unchanged.

    Args:
        fetch_page: Coroutine function taking the cursor (None first) and
            returning a Page or an ``(items, next_cursor)`` tuple
        max_pages: Upper bound on calls to ``fetch_page``

    Returns:
        All items in page order
    """
    if max_pages < 1:
        raise ValueError(f"max_pages must be at least 1, got {max_pages}")

    items: list[Any] = []
    cursor: PaginationCursor = None
    current_page = 1

    while True:
        page_items, cursor = await fetch_page(cursor)
        items.extend(page_items or [])
        current_page += 1
        if not cursor:
            break
        if current_page > max_pages:
            logger.warning(f"Stopped pagination at the {max_pages} page cap with {len(items)} items collected")
            break

    return items
