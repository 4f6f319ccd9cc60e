"""
Shared fakes for tests that exercise the HTTP layer without a network.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Union

import aiohttp
import pytest

from market_mirror.config import AppConfig, CrawlerConfig, StorageConfig


class FakeContent:
    """Stands in for ``response.content``; yields the given chunks in order."""

    def __init__(self, response: "FakeResponse", chunks: List[Any], delay: float = 0):
        self._response = response
        self._chunks = chunks
        self._delay = delay

    async def iter_any(self):
        for chunk in self._chunks:
            if self._delay:
                await asyncio.sleep(self._delay)
            if self._response.closed and self._response.fail_after_close:
                raise aiohttp.ClientConnectionError("Connection closed")
            if isinstance(chunk, BaseException):
                raise chunk
            yield chunk


class FakeResponse:
    """Minimal aiohttp response: status, streamed body, JSON body, close()."""

    def __init__(
        self,
        status: int = 200,
        chunks: Optional[List[Any]] = None,
        json_body: Any = None,
        url: str = "https://example.test/",
        delay: float = 0,
        fail_after_close: bool = True,
    ):
        self.status = status
        self.url = url
        self.json_body = json_body
        self.closed = False
        self.close_calls = 0
        self.fail_after_close = fail_after_close
        self.content = FakeContent(self, chunks or [], delay=delay)

    def close(self):
        self.closed = True
        self.close_calls += 1

    async def json(self, content_type=None):
        if isinstance(self.json_body, Exception):
            raise self.json_body
        return self.json_body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()


Route = Union[FakeResponse, Exception, List[Union[FakeResponse, Exception]]]


class FakeSession:
    """
    Routes GET/POST calls by exact URL.

    A route may be a response, an exception to raise, or a list consumed one
    call at a time. Every call is recorded in ``calls``.
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _respond(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get(url)
        if isinstance(route, list):
            route = route.pop(0)
        if route is None:
            return FakeResponse(status=404, url=url)
        if isinstance(route, Exception):
            raise route
        route.url = url
        return route

    def get(self, url: str, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self._respond("POST", url, **kwargs)

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]

    async def close(self):
        self.closed = True


def json_response(body: Any, status: int = 200) -> FakeResponse:
    return FakeResponse(status=status, json_body=body)


def html_response(html: str, status: int = 200, chunk_size: int = 4096) -> FakeResponse:
    data = html.encode("utf-8")
    chunks = [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]
    return FakeResponse(status=status, chunks=chunks)


@pytest.fixture
def fake_session():
    """Return the FakeSession class for building routed sessions."""
    return FakeSession


@pytest.fixture
def fake_response():
    """Return the FakeResponse class."""
    return FakeResponse


@pytest.fixture
def make_json_response():
    return json_response


@pytest.fixture
def make_html_response():
    return html_response


@pytest.fixture
def crawler_config():
    """Crawler settings pointing at two test hosts with fast retries."""
    return CrawlerConfig(
        hosts=["https://a.test", "https://b.test"],
        user_agent="Test User Agent",
        timeout_ms=2000,
        max_bytes=200000,
        early_abort=False,
        early_abort_min_bytes=64,
        concurrency=2,
        review_page_size=2,
        review_max_store=5,
        review_retries=2,
        retry_delay=0,
        ships_to=None,
        kind="sellers",
    )


@pytest.fixture
def app_config(crawler_config):
    return AppConfig(crawler=crawler_config, storage=StorageConfig(type="memory", path=""))
