"""Shared fixtures: settings with dummy credentials and a fake Fivetran API.

The fake API is an ``httpx.MockTransport`` serving canned listing pages keyed
by path and cursor, so the real client, caller and pager run unmodified.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from fivetran_automation.config import Settings
from fivetran_automation.fivetran_client import FivetranClient

BASE_URL = "https://api.fivetran.com/v1"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's FIVETRAN_* variables out of the tests."""
    for name in ("FIVETRAN_API_KEY", "FIVETRAN_API_SECRET", "FIVETRAN_API_VERSION",
                 "FIVETRAN_BASE_URL", "PAGE_SIZE", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(fivetran_api_key="key", fivetran_api_secret="secret")


def listing(items: Any, next_cursor: Optional[str] = None) -> Dict[str, Any]:
    """Body of a Fivetran listing response."""
    return {"code": "Success", "data": {"items": items, "next_cursor": next_cursor}}


class FakeApi:
    """Canned responses keyed by ``(path, cursor)``; ``cursor`` is None for the first page."""

    def __init__(self):
        self.routes: Dict[Tuple[str, Optional[str]], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, body: Any, cursor: Optional[str] = None, status: int = 200) -> None:
        self.routes[(path, cursor)] = (status, body)

    def add_pages(self, path: str, pages: List[List[Any]]) -> None:
        """Chain *pages* with cursors ``c1``, ``c2``, ... and a null final cursor."""
        for index, items in enumerate(pages):
            cursor = f"c{index}" if index else None
            next_cursor = f"c{index + 1}" if index + 1 < len(pages) else None
            self.add(path, listing(items, next_cursor), cursor=cursor)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/v1", "", 1)
        key = (path, request.url.params.get("cursor"))
        if key not in self.routes:
            return httpx.Response(404, json={"code": "NotFound", "message": "No such page"})
        status, body = self.routes[key]
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def client(settings, api):
    fivetran = FivetranClient(settings, transport=api.transport)
    yield fivetran
    fivetran.close()
