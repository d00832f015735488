from __future__ import annotations

import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import asyncio

import httpx
import pytest
from pydantic import ValidationError

from pageable.__main__ import main
from pageable.app import run_app
from pageable.config import Settings
from pageable.remote.client import ListingClient


def _patch_transport(monkeypatch: pytest.MonkeyPatch, handler) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    monkeypatch.setattr(ListingClient, "_get_client", lambda self: client)
    return seen


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("PAGEABLE_BASE_URL", "PAGEABLE_PAGE_SIZE", "PAGEABLE_LOADING_GRACE"):
        monkeypatch.delenv(name, raising=False)

    s = Settings()
    assert s.api_base_url == "https://pokeapi.co"
    assert s.page_size == 30
    assert s.loading_grace == 0.01


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAGEABLE_PAGE_SIZE", "50")
    monkeypatch.setenv("PAGEABLE_BASE_URL", "https://example.test")

    s = Settings()
    assert s.page_size == 50
    assert s.api_base_url == "https://example.test"


def test_settings_reject_zero_page_size(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAGEABLE_PAGE_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_run_app_walks_to_end(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAGEABLE_LOADING_GRACE", "0")
    catalog = [{"name": f"n{i}"} for i in range(7)]

    def handler(request: httpx.Request) -> httpx.Response:
        limit = int(request.url.params["limit"])
        offset = int(request.url.params["offset"])
        return httpx.Response(
            200, json={"count": len(catalog), "results": catalog[offset : offset + limit]}
        )

    seen = _patch_transport(monkeypatch, handler)

    code = asyncio.run(
        run_app(path="/things", base_url="https://example.test/", page_size=3)
    )
    assert code == 0
    assert [(r.url.host, r.url.path) for r in seen] == [("example.test", "/things")] * 3


def test_run_app_reports_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    _patch_transport(monkeypatch, handler)

    assert asyncio.run(run_app(path="/things", base_url="https://example.test")) == 1


def test_run_app_max_pages(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"name": "x"}]})

    seen = _patch_transport(monkeypatch, handler)

    assert asyncio.run(run_app(path="/things", page_size=1, max_pages=2)) == 0
    assert len(seen) == 2


def test_cli_rejects_zero_max_pages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["pageable", "--max-pages", "0"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 2
