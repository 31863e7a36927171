# === FILE: index_ping/crawler/crawler.py ===
from __future__ import annotations

import time
from collections import deque
from typing import Deque, Dict, List, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from index_ping.config import DEFAULT_REQUEST_TIMEOUT
from index_ping.crawler.fetcher import Fetcher
from index_ping.crawler.models import SitemapDocument
from index_ping.errors import CrawlLimitExceeded
from index_ping.logger import get_logger
from index_ping.parser.sitemap_parser import resolve_loc
from index_ping.utils import canonicalize_url

__all__ = ("MAX_TOTAL_SITEMAPS", "MAX_TOTAL_SITEMAP_URLS", "SitemapCrawler", "crawl_sitemaps")

MAX_TOTAL_SITEMAPS = 10_000
MAX_TOTAL_SITEMAP_URLS = 200_000


class SitemapCrawler:
    """Обход графа sitemap в ширину с защитой от циклов и двумя жёсткими лимитами."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_sitemaps: int = MAX_TOTAL_SITEMAPS,
        max_urls: int = MAX_TOTAL_SITEMAP_URLS,
    ) -> None:
        if max_sitemaps < 1 or max_urls < 1:
            raise ValueError("crawl limits must be >= 1")
        self.session = session
        self._owns_session = session is None
        self.timeout = timeout
        self.max_sitemaps = max_sitemaps
        self.max_urls = max_urls
        self.logger = get_logger("crawler")

    async def __aenter__(self) -> SitemapCrawler:
        if self.session is None:
            self.session = ClientSession(timeout=ClientTimeout(total=self.timeout), raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, entry_url: str) -> List[str]:
        """Возвращает все уникальные <loc> из urlset-документов, достижимых из ``entry_url``.

        Ошибка загрузки любого документа или превышение лимита прерывает обход
        целиком: частичный результат не возвращается.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        fetcher = Fetcher(self.session, self.timeout)

        start = time.monotonic()
        queue: Deque[str] = deque([canonicalize_url(entry_url) or entry_url])
        visited: Set[str] = set()
        discovered: Dict[str, None] = {}
        self.logger.info("Старт обхода sitemap: %s", entry_url)

        while queue:
            url = queue.popleft()
            if url in visited:
                continue
            visited.add(url)
            if len(visited) > self.max_sitemaps:
                raise CrawlLimitExceeded(f"sitemap recursion limit exceeded ({self.max_sitemaps} files)")

            document = await fetcher.fetch(url)
            if document.is_index:
                self._enqueue_children(document, queue, visited)
            else:
                self._collect_urls(document, discovered)

        duration = time.monotonic() - start
        self.logger.info(
            "Обход sitemap завершён: %d документов, %d URL за %.2f с",
            len(visited),
            len(discovered),
            duration,
        )
        return list(discovered)

    def _enqueue_children(self, document: SitemapDocument, queue: Deque[str], visited: Set[str]) -> None:
        for loc in document.locs:
            child = resolve_loc(loc, document.url)
            if child is None:
                self.logger.debug("Skipping unusable sitemap reference %r in %s", loc, document.url)
                continue
            if child not in visited:
                queue.append(child)

    def _collect_urls(self, document: SitemapDocument, discovered: Dict[str, None]) -> None:
        for loc in document.locs:
            absolute = resolve_loc(loc, document.url)
            if absolute is None:
                continue
            discovered[absolute] = None
            if len(discovered) > self.max_urls:
                raise CrawlLimitExceeded(f"sitemap URL hard limit exceeded ({self.max_urls})")


async def crawl_sitemaps(entry_url: str, *, session: Optional[ClientSession] = None, **options) -> List[str]:
    """Shortcut: open a :class:`SitemapCrawler` and crawl from *entry_url*."""
    async with SitemapCrawler(session, **options) as crawler:
        return await crawler.crawl(entry_url)
