"""Page-by-page iteration over :class:`DirectoryClient` listings."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Page

type PageFetcher[T] = cabc.Callable[[int], cabc.Awaitable[Page[T]]]


async def iter_pages[T](
    fetch_page: PageFetcher[T],
) -> typ.AsyncIterator[typ.Sequence[T]]:
    """Yield the items of page 1, 2, ... until a page reports no successor.

    A failing page propagates its exception to the consumer after every
    earlier page has been yielded, so callers keep what they already merged.
    """
    page = 1
    while True:
        result = await fetch_page(page)
        yield result.items
        if not result.has_next_page:
            return
        page += 1
