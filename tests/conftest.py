"""Shared fixtures: settings and an in-process fake of the Drupal CMS."""

import asyncio
from typing import Any, Callable, Dict, List

import httpx
import pytest

from app.config import Settings
from app.services.store import BuildSession

BASE_URL = "https://cms.example.edu"


class FakeCms:
    """Serves canned JSON for CMS paths through ``httpx.MockTransport``.

    A route value may be a JSON payload, an ``int`` status code, or a
    callable taking the :class:`httpx.Request` and returning a response.
    Unknown paths answer 404.  Every requested path is recorded in ``calls``.
    """

    def __init__(self, routes: Dict[str, Any] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[str] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode()
        self.calls.append(path)
        if path not in self.routes:
            return httpx.Response(404, json={"message": "Not found"})
        route = self.routes[path]
        if callable(route):
            return route(request)
        if isinstance(route, int):
            return httpx.Response(route)
        return httpx.Response(200, json=route)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))

    def count(self, path: str) -> int:
        return self.calls.count(path)


@pytest.fixture
def settings() -> Settings:
    return Settings(cms_base_url=BASE_URL, fetch_retries=2, fetch_retry_delay=0)


@pytest.fixture
def run_with_session(settings: Settings) -> Callable:
    """Run ``action(session)`` inside a fresh build session backed by *cms*."""

    def runner(cms: FakeCms, action: Callable, **overrides):
        session_settings = settings.model_copy(update=overrides) if overrides else settings

        async def go():
            async with BuildSession(session_settings, client=cms.client()) as session:
                result = await action(session)
                return session, result

        return asyncio.run(go())

    return runner


@pytest.fixture
def fake_cms() -> Callable[..., FakeCms]:
    return FakeCms
