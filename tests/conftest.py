# File: tests/conftest.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple, Union

import pytest

from index_ping.config import IndexNowConfig, load_config
from index_ping.logger import configure

SITE = "https://example.com"
KEY = "abc123key"

#: scripted answer: status, (status, body), body text (200) or an exception to raise
Answer = Union[int, Tuple[int, str], str, BaseException]


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeResponse:
    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self._body = body

    async def text(self, errors: str = "strict") -> str:
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class _Raising:
    def __init__(self, exc: BaseException) -> None:
        self._exc = exc

    async def __aenter__(self):
        raise self._exc

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession: replays scripted answers and records requests.

    ``posts`` is consumed in order (default 200 once exhausted); ``pages`` maps a
    URL (or is a callable url -> answer) for GET requests, 404 when unknown.
    """

    def __init__(
        self,
        posts: List[Answer] | None = None,
        pages: Dict[str, Answer] | Callable[[str], Answer] | None = None,
    ) -> None:
        self._posts = list(posts or [])
        if callable(pages):
            self._pages = pages
        else:
            mapping = pages or {}
            self._pages = lambda url: mapping.get(url, 404)
        self.post_calls: List[Tuple[str, Dict[str, Any]]] = []
        self.get_calls: List[str] = []
        self.closed = False

    def post(self, url: str, **kwargs):
        self.post_calls.append((url, kwargs))
        return self._answer(self._posts.pop(0) if self._posts else 200)

    def get(self, url: str, **kwargs):
        self.get_calls.append(url)
        return self._answer(self._pages(url))

    async def close(self) -> None:
        self.closed = True

    @staticmethod
    def _answer(item: Answer):
        if isinstance(item, BaseException):
            return _Raising(item)
        if isinstance(item, int):
            return FakeResponse(item)
        if isinstance(item, str):
            return FakeResponse(200, item)
        status, body = item
        return FakeResponse(status, body)


def urlset(*locs: str) -> str:
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return f'<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def sitemap_index(*locs: str) -> str:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return f'<?xml version="1.0"?><sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI tests re-point the project logger at CliRunner streams; restore it afterwards."""
    yield
    configure(level="WARNING")


@pytest.fixture()
def env() -> Dict[str, str]:
    """Minimal valid environment for load_config."""
    return {
        "SITE_URL": SITE,
        "INDEXNOW_KEY": KEY,
        "INDEXNOW_ADMIN_TOKEN": "s3cret",
    }


@pytest.fixture()
def config(env) -> IndexNowConfig:
    return load_config(env)
