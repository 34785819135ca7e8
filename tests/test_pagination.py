"""Unit tests for cursor pagination."""

import pytest

from marketplace_adapters.exceptions import ErrorKind
from marketplace_adapters.utils.error_mapper import create_error
from marketplace_adapters.utils.pagination import Page, collect_all


class TestCollectAll:
    """Test the pagination aggregator."""

    @pytest.mark.asyncio
    async def test_follows_cursor_until_exhausted(self):
        pages = {None: Page([1, 2], "a"), "a": Page([3], "b"), "b": Page([4, 5], None)}
        cursors = []

        async def fetch_page(cursor):
            cursors.append(cursor)
            return pages[cursor]

        assert await collect_all(fetch_page) == [1, 2, 3, 4, 5]
        assert cursors == [None, "a", "b"]

    @pytest.mark.asyncio
    async def test_page_cap_returns_partial_results(self):
        """Test an endpoint that always returns a cursor is called exactly max_pages times."""
        calls = 0

        async def fetch_page(cursor):
            nonlocal calls
            calls += 1
            return Page([calls], f"token-{calls}")

        items = await collect_all(fetch_page, max_pages=4)

        assert calls == 4
        assert items == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_default_cap_is_ten_pages(self):
        calls = 0

        async def fetch_page(cursor):
            nonlocal calls
            calls += 1
            return Page([], "more")

        assert await collect_all(fetch_page) == []
        assert calls == 10

    @pytest.mark.asyncio
    async def test_empty_cursor_stops(self):
        calls = 0

        async def fetch_page(cursor):
            nonlocal calls
            calls += 1
            return ["only"], ""

        assert await collect_all(fetch_page) == ["only"]
        assert calls == 1

    @pytest.mark.asyncio
    async def test_single_page_cap(self):
        async def fetch_page(cursor):
            return Page(["x"], "next")

        assert await collect_all(fetch_page, max_pages=1) == ["x"]

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        async def fetch_page(cursor):
            if cursor:
                raise create_error("Service down", ErrorKind.SERVICE_UNAVAILABLE, context="vendors.get_orders")
            return Page([1], "next")

        with pytest.raises(Exception) as exc_info:
            await collect_all(fetch_page)
        assert exc_info.value.kind == ErrorKind.SERVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_invalid_max_pages(self):
        async def fetch_page(cursor):
            return Page([], None)

        with pytest.raises(ValueError):
            await collect_all(fetch_page, max_pages=0)
