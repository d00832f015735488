from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from pageable.controller import PageController


async def iter_pages(
    controller: PageController[Any],
    *,
    reload: bool = True,
    max_pages: int | None = None,
) -> AsyncIterator[tuple[Any, ...]]:
    """Drive `controller` to the end, yielding the items each page added.

    With `reload=False` the walk continues from the controller's current
    position. `max_pages` bounds the number of fetches made by this call and
    must be at least 1. Empty pages are not yielded.
    """

    if max_pages is not None and max_pages < 1:
        raise ValueError("max_pages must be >= 1")

    fetched = 0
    if reload:
        await controller.reload()
        fetched += 1
        if controller.items:
            yield controller.items

    while not controller.has_reached_end:
        if max_pages is not None and fetched >= max_pages:
            return
        before = len(controller.items)
        await controller.load_next_page()
        fetched += 1
        added = controller.items[before:]
        if added:
            yield added


async def collect_all(controller: PageController[Any], *, reload: bool = True) -> list[Any]:
    async for _ in iter_pages(controller, reload=reload):
        pass
    return list(controller.items)
