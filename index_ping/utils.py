# File: index_ping/utils.py
"""index_ping.utils: Нормализация и проверка URL, разбиение на батчи и мелкие хелперы."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, TypeVar
from urllib.parse import quote, urlsplit, urlunsplit

from index_ping.errors import ConfigError
from index_ping.logger import get_logger
from index_ping.models import NormalizedUrls

__all__: Sequence[str] = (
    "FAILURE_SNIPPET_LIMIT",
    "canonicalize_url",
    "parse_https_url",
    "is_under_origin",
    "validate_and_normalize_urls",
    "split_into_batches",
    "truncate_snippet",
    "backoff_delay",
)

FAILURE_SNIPPET_LIMIT = 300

_DEFAULT_PORTS = {"http": 80, "https": 443}
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&'()*+,;=-._~"

log = get_logger("urls")

T = TypeVar("T")


def _remove_dot_segments(path: str) -> str:
    """RFC 3986 §5.2.4 для абсолютного пути; ``%2e`` считается точкой."""
    segments = path.split("/")[1:]
    output: List[str] = []
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        dots = segment.lower().replace("%2e", ".")
        if dots == "..":
            if output:
                output.pop()
        elif dots != ".":
            output.append(segment)
            continue
        if last:
            output.append("")
    return "/" + "/".join(output)


def canonicalize_url(url: str) -> Optional[str]:
    """Разбирает абсолютный URL и возвращает каноническую строку без фрагмента.

    Схема и хост приводятся к нижнему регистру, порт по умолчанию убирается,
    пустой путь становится ``/``, сегменты ``.``/``..`` схлопываются,
    небезопасные символы кодируются.
    Возвращает ``None``, если строка не является абсолютным URL.
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host or any(ch.isspace() for ch in parts.netloc):
        return None

    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None or port == _DEFAULT_PORTS.get(scheme) else f"{host}:{port}"
    userinfo, at, _ = parts.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"

    path = quote(_remove_dot_segments(parts.path or "/"), safe=_PATH_SAFE)
    query = quote(parts.query, safe=_QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, ""))


def parse_https_url(value: Any, field_name: str) -> str:
    """Validate a configuration URL; the error message names *field_name*."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigError(f"{field_name} is required")
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a valid URL")
    canonical = canonicalize_url(value)
    if canonical is None:
        raise ConfigError(f"{field_name} must be a valid URL")
    if urlsplit(canonical).scheme != "https":
        raise ConfigError(f"{field_name} must use https")
    return canonical


def is_under_origin(url: str, site_origin: str) -> bool:
    return url == site_origin or url.startswith(f"{site_origin}/") or url.startswith(f"{site_origin}?")


def _describe_invalid(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def validate_and_normalize_urls(raw_urls: Iterable[Any], site_origin: str) -> NormalizedUrls:
    """Фильтрует кандидатов: только HTTPS в пределах ``site_origin``, без дублей.

    Никогда не бросает исключений: мусор попадает в ``invalid``, повторы
    молча отбрасываются и учитываются в ``duplicates``.
    """
    result = NormalizedUrls()
    seen: set[str] = set()

    for raw in raw_urls:
        if not isinstance(raw, str) or not raw.strip():
            result.invalid.append(_describe_invalid(raw))
            continue

        trimmed = raw.strip()
        normalized = canonicalize_url(trimmed)
        if normalized is None:
            result.invalid.append(trimmed)
            continue

        if not normalized.startswith("https://") or not is_under_origin(normalized, site_origin):
            result.invalid.append(normalized)
            continue

        if normalized in seen:
            result.duplicates += 1
            continue
        seen.add(normalized)
        result.valid.append(normalized)

    log.debug(
        "Normalized URLs: %d valid, %d invalid, %d duplicates dropped",
        len(result.valid),
        len(result.invalid),
        result.duplicates,
    )
    return result


def split_into_batches(items: Sequence[T], size: int) -> List[List[T]]:
    """Режет последовательность на подряд идущие куски длиной не больше ``size``."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def truncate_snippet(value: Any, limit: int = FAILURE_SNIPPET_LIMIT) -> str:
    """Trim *value* to at most *limit* characters, marking the cut with ``...``."""
    if not isinstance(value, str):
        return ""
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def backoff_delay(attempt: int, base: float) -> float:
    """Exponential backoff: ``base * 2**attempt`` seconds."""
    return base * 2**attempt
