from __future__ import annotations

import logging

from pageable.config import Settings
from pageable.controller import FetchFailure, PageController
from pageable.pagination import iter_pages
from pageable.remote.client import ListingClient
from pageable.remote.source import ListingSource


log = logging.getLogger("pageable")


async def run_app(
    *,
    path: str,
    base_url: str | None = None,
    page_size: int | None = None,
    max_pages: int | None = None,
    show_items: bool = False,
) -> int:
    settings = Settings.load()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Keep output readable (httpx can be very chatty at INFO).
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    client = ListingClient.from_settings(settings)
    if base_url:
        client.base_url = base_url.rstrip("/")
    size = page_size or settings.page_size
    log.info("Listing base_url=%s path=%s page_size=%d", client.base_url, path, size)

    source = ListingSource(client, path, page_size=size)
    controller: PageController[dict] = PageController(
        source, loading_grace=settings.loading_grace, name=path
    )

    async with client:
        try:
            async for page in iter_pages(controller, max_pages=max_pages):
                log.info(
                    "page=%d +%d items=%d/%s",
                    controller.current_page,
                    len(page),
                    len(controller.items),
                    controller.total_count,
                )
                if show_items:
                    for item in page:
                        print(controller.key_of(item))
        except FetchFailure as e:
            log.error("Stopped after %d page(s): %s", controller.current_page, e)
            return 1

    log.info(
        "Done pages=%d items=%d total=%s end=%s",
        controller.current_page,
        len(controller.items),
        controller.total_count,
        controller.has_reached_end,
    )
    return 0
