from __future__ import annotations

from typing import Any, Callable

from pageable.controller import FetchFailure, PageResult
from pageable.remote.client import Json, ListingClient


class ListingSource:
    """`fetch_page` for a `PageController`, backed by one listing endpoint.

    Page `i` maps to `offset = page_size * i`. `parse` converts each raw JSON
    object into the controller's item type.
    """

    def __init__(
        self,
        client: ListingClient,
        path: str,
        *,
        page_size: int,
        params: dict[str, Any] | None = None,
        parse: Callable[[Json], Any] | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.client = client
        self.path = path
        self.page_size = int(page_size)
        self.params = dict(params or {})
        self.parse = parse

    async def __call__(self, page_index: int) -> PageResult:
        try:
            page = await self.client.get_page(
                self.path,
                limit=self.page_size,
                offset=self.page_size * page_index,
                params=self.params,
            )
        except FetchFailure as e:
            if e.page_index is None:
                e.page_index = page_index
            raise

        items: list[Any] = page.items
        if self.parse is not None:
            try:
                items = [self.parse(raw) for raw in page.items]
            except (KeyError, TypeError, ValueError) as e:
                raise FetchFailure(
                    f"could not parse page {page_index} of {self.path}: {e}", page_index=page_index
                ) from e
        return PageResult(items=items, total_count=page.count)
