# index_ping/crawler/models.py
"""
Data models for the sitemap crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from index_ping.parser.sitemap_parser import SITEMAP_INDEX


@dataclass(slots=True)
class SitemapDocument:
    """One fetched sitemap: its URL, detected kind and raw <loc> values."""

    url: str
    kind: str
    locs: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return self.kind == SITEMAP_INDEX
