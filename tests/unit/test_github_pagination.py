"""Unit tests for page-by-page listing iteration."""

from __future__ import annotations

import pytest

from permsync.github import GitHubAPIError, Page
from permsync.github.pagination import iter_pages


@pytest.mark.asyncio
async def test_iter_pages_follows_has_next_page() -> None:
    """Pages are requested from 1 until one reports no successor."""
    requested: list[int] = []
    pages = {1: Page(["a", "b"], True), 2: Page(["c"], True), 3: Page([], False)}

    async def fetch(page: int) -> Page[str]:
        requested.append(page)
        return pages[page]

    batches = [list(batch) async for batch in iter_pages(fetch)]

    assert batches == [["a", "b"], ["c"], []]
    assert requested == [1, 2, 3]


@pytest.mark.asyncio
async def test_iter_pages_yields_earlier_pages_before_failure() -> None:
    """A failing page surfaces only after earlier pages were consumed."""
    seen: list[str] = []

    async def fetch(page: int) -> Page[str]:
        if page == 2:
            raise GitHubAPIError.http_error(502)
        return Page([f"item{page}"], True)

    with pytest.raises(GitHubAPIError, match="502"):
        async for batch in iter_pages(fetch):
            seen.extend(batch)

    assert seen == ["item1"]
