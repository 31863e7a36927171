"""index_ping.crawler: обход графа sitemap."""

from index_ping.crawler.crawler import (
    MAX_TOTAL_SITEMAP_URLS,
    MAX_TOTAL_SITEMAPS,
    SitemapCrawler,
    crawl_sitemaps,
)
from index_ping.crawler.fetcher import Fetcher
from index_ping.crawler.models import SitemapDocument

__all__ = [
    "MAX_TOTAL_SITEMAPS",
    "MAX_TOTAL_SITEMAP_URLS",
    "SitemapCrawler",
    "crawl_sitemaps",
    "Fetcher",
    "SitemapDocument",
]
