# File: index_ping/engine.py
"""index_ping.engine: Оркестрация: конфиг, обход sitemap, нормализация и отправка батчей."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from aiohttp import ClientSession

from index_ping.config import IndexNowConfig, SourceT, load_config
from index_ping.crawler import crawl_sitemaps
from index_ping.errors import ValidationError
from index_ping.logger import get_logger
from index_ping.models import SubmissionMode, SubmissionResult
from index_ping.submitter import submit

__all__ = [
    "submit_explicit_urls",
    "submit_entire_sitemap",
    "collect_blog_urls",
    "submit_blog_event",
]

_BLOG_URL_FIELDS = ("url", "postUrl", "deletedPostUrl", "canonicalUrl")

log = get_logger("engine")


def _resolve_config(config: Optional[IndexNowConfig], source: SourceT) -> IndexNowConfig:
    return config if config is not None else load_config(source)


async def submit_explicit_urls(
    raw_urls: Sequence[Any],
    mode: Any = SubmissionMode.UPDATED,
    *,
    config: Optional[IndexNowConfig] = None,
    source: SourceT = None,
    session: Optional[ClientSession] = None,
) -> SubmissionResult:
    """Отправляет явно переданные URL. Без обхода sitemap.

    ``mode=None`` трактуется как ``updated``. Пробрасывает ConfigError и
    ValidationError; ошибки отдельных батчей возвращаются в результате.
    """
    cfg = _resolve_config(config, source)
    return await submit(raw_urls, mode or SubmissionMode.UPDATED, cfg, session=session)


async def submit_entire_sitemap(
    *,
    config: Optional[IndexNowConfig] = None,
    source: SourceT = None,
    session: Optional[ClientSession] = None,
) -> SubmissionResult:
    """Обходит sitemap сайта и отправляет все найденные URL с режимом ``updated``.

    Ошибка обхода (CrawlLimitExceeded, CrawlFetchFailure) прерывает операцию
    до отправки первого батча.
    """
    cfg = _resolve_config(config, source)
    urls = await crawl_sitemaps(cfg.sitemap_entry_url, session=session, timeout=cfg.request_timeout)
    log.info("Sitemap %s yielded %d URLs", cfg.sitemap_entry_url, len(urls))
    return await submit(urls, SubmissionMode.UPDATED, cfg, session=session)


def collect_blog_urls(body: Mapping[str, Any], site_origin: str) -> List[str]:
    """Собирает кандидатов из события CMS: ``urls[]``, прямые поля и пару ``semesterId``/``slug``."""
    candidates: List[Any] = []

    urls = body.get("urls")
    if isinstance(urls, list):
        candidates.extend(urls)

    for name in _BLOG_URL_FIELDS:
        value = body.get(name)
        if isinstance(value, str) and value.strip():
            candidates.append(value)

    semester_id = body.get("semesterId")
    slug = body.get("slug")
    if semester_id is not None and isinstance(slug, str) and slug.strip():
        candidates.append(f"{site_origin}/blog/semester/{str(semester_id).strip()}/{slug.strip()}")

    cleaned = (c.strip() for c in candidates if isinstance(c, str))
    return list(dict.fromkeys(c for c in cleaned if c))


async def submit_blog_event(
    body: Mapping[str, Any],
    *,
    config: Optional[IndexNowConfig] = None,
    source: SourceT = None,
    session: Optional[ClientSession] = None,
) -> SubmissionResult:
    """Handle a content event: validate ``action``, collect URLs, submit them."""
    cfg = _resolve_config(config, source)
    action = SubmissionMode.parse(body.get("action") or SubmissionMode.UPDATED)
    urls = collect_blog_urls(body, cfg.site_origin)
    if not urls:
        raise ValidationError(
            "Provide at least one blog URL via urls[], postUrl, deletedPostUrl, or { semesterId, slug }"
        )
    return await submit(urls, action, cfg, session=session)

