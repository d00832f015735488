from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from pageable.config import Settings
from pageable.controller import FetchFailure


Json = dict[str, Any]


@dataclass(frozen=True)
class ListingPage:
    items: list[Json]
    count: int | None


def _as_count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class ListingClient:
    """Reads offset/limit JSON listings, e.g. `GET /api/v2/pokemon?limit=30&offset=60`.

    Expected body shape: `{"count": 1302, "next": "...", "results": [...]}`.
    """

    base_url: str
    timeout: float = 10.0
    items_field: str = "results"
    count_field: str = "count"

    _client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ListingClient":
        return cls(base_url=settings.api_base_url.rstrip("/"), timeout=settings.request_timeout)

    async def __aenter__(self) -> "ListingClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def request(self, path: str, *, params: dict[str, Any] | None = None) -> Json:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._get_client().get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Attach the response body to aid debugging.
            body_preview = e.response.text[:200] if e.response.content else ""
            msg = f"GET {path} failed with {e.response.status_code}"
            if body_preview:
                msg = f"{msg} | body={body_preview}"
            raise FetchFailure(msg) from e
        except httpx.HTTPError as e:
            raise FetchFailure(f"GET {path} failed: {e}") from e

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as e:
            raise FetchFailure(f"GET {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise FetchFailure(f"GET {path} returned {type(data).__name__}, expected an object")
        return data

    async def get_page(
        self,
        path: str,
        *,
        limit: int,
        offset: int = 0,
        params: dict[str, Any] | None = None,
    ) -> ListingPage:
        query: dict[str, Any] = dict(params or {})
        query["limit"] = limit
        query["offset"] = offset

        data = await self.request(path, params=query)
        items = data.get(self.items_field)
        if items is None:
            items = []
        if not isinstance(items, list):
            raise FetchFailure(f"GET {path}: '{self.items_field}' is not a list")
        return ListingPage(
            items=list(items),
            count=_as_count(data.get(self.count_field)),
        )
