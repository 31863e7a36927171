# index_ping/crawler/fetcher.py
"""
Fetcher module: downloads sitemap documents with a bounded timeout.

Unlike batch submission there is no retry here: any non-2xx answer or transport
error aborts the crawl, because a missing branch of the sitemap graph would
silently under-submit.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession, ClientTimeout

from index_ping.crawler.models import SitemapDocument
from index_ping.errors import CrawlFetchFailure
from index_ping.logger import get_logger
from index_ping.parser.sitemap_parser import classify_sitemap, extract_loc_values

SITEMAP_ACCEPT = "application/xml,text/xml,text/plain,*/*"

log = get_logger("fetcher")


class Fetcher:
    """GETs sitemap documents and turns them into :class:`SitemapDocument`."""

    def __init__(self, session: ClientSession, timeout: float) -> None:
        self.session = session
        self._timeout = ClientTimeout(total=timeout)

    async def fetch_text(self, url: str) -> str:
        """
        Fetch *url* and return the body as text.

        Raises CrawlFetchFailure on non-2xx status, timeout or connection error.
        """
        try:
            async with self.session.get(
                url,
                headers={"Accept": SITEMAP_ACCEPT},
                timeout=self._timeout,
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise CrawlFetchFailure(url, f"Failed to fetch sitemap ({resp.status}) from {url}")
                return await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise CrawlFetchFailure(url, f"Timed out fetching sitemap from {url}") from exc
        except ClientError as exc:
            raise CrawlFetchFailure(url, f"Failed to fetch sitemap from {url}: {exc}") from exc

    async def fetch(self, url: str) -> SitemapDocument:
        xml_text = await self.fetch_text(url)
        locs = extract_loc_values(xml_text)
        kind = classify_sitemap(xml_text, locs)
        log.debug("Fetched %s: %s with %d <loc> entries", url, kind, len(locs))
        return SitemapDocument(url=url, kind=kind, locs=locs)
