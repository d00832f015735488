"""Headless stand-in for the "load more" row at the bottom of a lazy list.

A rendering layer calls `appear()` / `disappear()` as the sentinel row scrolls
in and out of view. While it stays visible, every completed page (the loading
flag falling back to false) triggers the next one, so a short list that never
pushes the sentinel off screen still loads until the end.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pageable.controller import PageController, PageLoad


log = logging.getLogger(__name__)


class ScrollSentinel:
    def __init__(self, controller: PageController[Any]) -> None:
        self.controller = controller
        self.visible = False
        self.last_error: BaseException | None = None
        self._last_load_ok = True
        self._tasks: set[asyncio.Task[None]] = set()
        self._subscriptions = [
            controller.subscribe("loading", self._on_loading_changed),
            controller.on_page_loaded(self._on_page_loaded),
        ]

    @property
    def shown(self) -> bool:
        """Whether the sentinel row should be rendered at all."""
        return not self.controller.has_reached_end

    def appear(self) -> asyncio.Task[None] | None:
        self.visible = True
        return self._maybe_load()

    def disappear(self) -> None:
        self.visible = False

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []

    async def wait_idle(self) -> None:
        """Wait for every load this sentinel started, including re-triggers."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            await asyncio.sleep(0)

    def _on_page_loaded(self, outcome: PageLoad) -> None:
        self._last_load_ok = outcome.ok

    def _on_loading_changed(self, loading: bool) -> None:
        # A failed page does not re-trigger; the next appear() tries again.
        if not loading and self._last_load_ok:
            self._maybe_load()

    def _maybe_load(self) -> asyncio.Task[None] | None:
        controller = self.controller
        if not self.visible or controller.loading or controller.has_reached_end:
            return None
        task = asyncio.get_running_loop().create_task(self._load())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _load(self) -> None:
        try:
            await self.controller.load_next_page()
        except Exception as e:
            self.last_error = e
            log.warning("%s: load more failed: %s", self.controller.name, e)
        else:
            self.last_error = None
