"""Incremental page loading with end-of-list detection.

`PageController` owns the paging state for one list (loaded items, reported
total, next page index, loading flag, end flag) and asks an injected
`fetch_page(page_index)` coroutine for one page at a time. All mutation
happens on the event loop that awaits it; the fetch is the only suspension
point.

Usage:
    async def fetch_page(page_index: int) -> PageResult:
        ...

    controller = PageController(fetch_page)
    await controller.reload()
    while not controller.has_reached_end:
        await controller.load_next_page()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, NamedTuple, TypeVar

from pageable.observable import Callback, Observable, Subscription


log = logging.getLogger(__name__)

T = TypeVar("T")

# Lets a visible sentinel observe a true -> false edge after each page.
DEFAULT_LOADING_GRACE = 0.01


class FetchFailure(RuntimeError):
    """A page source could not produce the requested page."""

    def __init__(self, message: str, *, page_index: int | None = None) -> None:
        super().__init__(message)
        self.page_index = page_index


class PageResult(NamedTuple):
    items: list[Any]
    total_count: int | None = None


@dataclass(frozen=True)
class PageLoad:
    """Payload of the `page_loaded` event, emitted once per settled fetch."""

    page_index: int
    item_count: int = 0
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


FetchPage = Callable[[int], Awaitable[Any]]


def default_key(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("id", item.get("name"))
    return getattr(item, "id", item)


def _unpack(result: Any) -> tuple[list[Any], int | None]:
    try:
        items, total = result
    except (TypeError, ValueError):
        raise TypeError(
            f"fetch_page must return (items, total_count), got {type(result).__name__}"
        ) from None
    return list(items), (int(total) if total is not None else None)


class PageController(Observable, Generic[T]):
    _published = ("items", "total_count", "current_page", "loading", "has_reached_end")
    _events = ("page_loaded",)

    def __init__(
        self,
        fetch_page: FetchPage | None = None,
        *,
        key: Callable[[T], Any] | None = None,
        loading_grace: float = DEFAULT_LOADING_GRACE,
        name: str | None = None,
    ) -> None:
        super().__init__()
        if loading_grace < 0:
            raise ValueError("loading_grace must be >= 0")
        self._fetch_page = fetch_page
        self._key = key or default_key
        self.loading_grace = float(loading_grace)
        self.name = name or type(self).__name__

        # Bumped by reload(); fetches from an older generation are discarded.
        self._generation = 0
        # Latest fetch task; kept after it settles. Only unfinished tasks are joined.
        self._inflight: asyncio.Future[None] | None = None
        self._inflight_generation = -1
        self._active_fetches = 0
        self._clear_handle: asyncio.TimerHandle | None = None

        self._init_fields(
            {
                "items": (),
                "total_count": None,
                "current_page": 0,
                "loading": False,
                "has_reached_end": False,
            }
        )

    # -------- Published state --------

    @property
    def items(self) -> tuple[T, ...]:
        return self._value("items")

    @property
    def total_count(self) -> int | None:
        return self._value("total_count")

    @property
    def current_page(self) -> int:
        """Index of the next page to request; also the number of pages loaded."""
        return self._value("current_page")

    @property
    def loading(self) -> bool:
        return self._value("loading")

    @property
    def has_reached_end(self) -> bool:
        return self._value("has_reached_end")

    def key_of(self, item: T) -> Any:
        return self._key(item)

    def on_page_loaded(self, callback: Callback) -> Subscription:
        return self.subscribe("page_loaded", callback)

    # -------- Data source --------

    async def fetch_page(self, page_index: int) -> Any:
        """Return `(items, total_count)` for `page_index`.

        Subclasses may override this instead of passing `fetch_page` to the
        constructor.
        """
        if self._fetch_page is None:
            raise NotImplementedError(
                f"{type(self).__name__} needs a fetch_page callable or override"
            )
        return await self._fetch_page(page_index)

    # -------- Operations --------

    async def reload(self) -> None:
        """Reset to an empty list and load the first page again."""

        self._generation += 1
        log.debug("%s: reload (generation=%d)", self.name, self._generation)
        self._publish_many(
            [
                ("current_page", 0),
                ("items", ()),
                ("total_count", None),
                ("has_reached_end", False),
            ]
        )
        await self.load_next_page()

    async def load_next_page(self) -> None:
        """Fetch the next page and append it.

        No-op once the end has been reached. A call made while a fetch of the
        same generation is in flight waits for that fetch instead of starting
        another one, and sees its outcome (including its exception). If a reload
        replaces the fetch being awaited, the call resolves with the reload.
        """

        if self.has_reached_end:
            log.debug("%s: end reached, skipping page %d", self.name, self.current_page)
            return

        inflight = self._inflight
        if (
            inflight is not None
            and not inflight.done()
            and self._inflight_generation == self._generation
        ):
            log.debug("%s: joining in-flight fetch of page %d", self.name, self.current_page)
            await self._await_fetch(inflight, self._inflight_generation)
            return

        generation = self._generation
        self._begin_loading()
        task = asyncio.ensure_future(self._load_page(generation, self.current_page))
        self._inflight = task
        self._inflight_generation = generation
        await self._await_fetch(task, generation)

    async def _await_fetch(self, task: asyncio.Future[None], generation: int) -> None:
        # In-flight fetches are not cancellable; a cancelled caller stops waiting only.
        # _inflight keeps the latest task after it settles, so its outcome is still seen.
        while True:
            try:
                await asyncio.shield(task)
            except Exception:
                if self._inflight_generation == generation:
                    raise
            if self._inflight_generation == generation:
                return
            # A reload replaced this fetch: resolve with the fetch that replaced it.
            task, generation = self._inflight, self._inflight_generation

    # -------- Internals --------

    async def _load_page(self, generation: int, page_index: int) -> None:
        new_items: list[Any] = []
        error: BaseException | None = None
        try:
            new_items, reported_total = _unpack(await self.fetch_page(page_index))
        except Exception as exc:
            error = exc
            if generation == self._generation:
                log.warning("%s: fetch of page %d failed: %s", self.name, page_index, exc)
            raise
        else:
            if generation != self._generation:
                log.debug(
                    "%s: discarding page %d from generation %d", self.name, page_index, generation
                )
            else:
                self._apply_page(new_items, reported_total)
        finally:
            self._settle(generation, PageLoad(page_index, len(new_items), error))

    def _apply_page(self, new_items: list[Any], reported_total: int | None) -> None:
        items = self.items + tuple(new_items)
        total = self.total_count
        if reported_total is not None and reported_total != total:
            total = reported_total

        ended = len(items) == total or not new_items
        if ended and total != len(items):
            # Collected items win over a server total that disagrees.
            if total is not None:
                log.info(
                    "%s: reported total %d corrected to %d", self.name, total, len(items)
                )
            total = len(items)

        self._publish_many(
            [
                ("total_count", total),
                ("items", items),
                ("current_page", self.current_page + 1),
                ("has_reached_end", ended),
            ]
        )
        log.debug(
            "%s: page %d loaded (+%d, %d/%s)%s",
            self.name,
            self.current_page - 1,
            len(new_items),
            len(items),
            total,
            " end" if ended else "",
        )

    def _begin_loading(self) -> None:
        self._active_fetches += 1
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None
        self._publish("loading", True)

    def _settle(self, generation: int, outcome: PageLoad) -> None:
        self._active_fetches -= 1
        if generation == self._generation:
            self._emit("page_loaded", outcome)
        if self._active_fetches == 0:
            self._schedule_clear_loading()

    def _schedule_clear_loading(self) -> None:
        if self.loading_grace <= 0:
            self._clear_loading()
            return
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self.loading_grace, self._clear_loading)

    def _clear_loading(self) -> None:
        self._clear_handle = None
        if self._active_fetches == 0:
            self._publish("loading", False)
