# File: index_ping/errors.py
"""index_ping.errors: Иерархия исключений IndexPing.

Фатальные ошибки (конфигурация, валидация запроса, обход sitemap) пробрасываются
вызывающему коду. Ошибки нотификатора на уровне отдельного батча перехватываются
сабмиттером, логируются и попадают в ``SubmissionResult.failed_batches``.
"""
from __future__ import annotations

from typing import Union

__all__ = [
    "IndexPingError",
    "ConfigError",
    "ValidationError",
    "NotifierError",
    "NotifierRejection",
    "NotifierTransientFailure",
    "CrawlError",
    "CrawlLimitExceeded",
    "CrawlFetchFailure",
    "NETWORK_ERROR",
]

#: Status marker recorded for batches that never got an HTTP response.
NETWORK_ERROR = "NETWORK_ERROR"

StatusT = Union[int, str]


class IndexPingError(Exception):
    """Базовый класс всех ошибок пакета."""


class ConfigError(IndexPingError, ValueError):
    """Отсутствующее или некорректное значение конфигурации."""


class ValidationError(IndexPingError, ValueError):
    """Некорректная форма запроса: ``urls`` не массив, неизвестный ``mode``."""


class NotifierError(IndexPingError):
    """Неуспешный ответ нотификатора для одного батча."""

    def __init__(self, status: StatusT, snippet: str) -> None:
        super().__init__(f"notifier responded with {status}: {snippet}")
        self.status = status
        self.snippet = snippet


class NotifierRejection(NotifierError):
    """Terminal non-2xx, non-5xx answer. Never retried."""


class NotifierTransientFailure(NotifierError):
    """5xx answer or transport-level failure. Retried within the budget."""


class CrawlError(IndexPingError):
    """Обход sitemap прерван."""


class CrawlLimitExceeded(CrawlError):
    """Превышен жёсткий лимит числа документов или URL."""


class CrawlFetchFailure(CrawlError):
    """Документ sitemap не удалось загрузить (non-2xx или сетевая ошибка)."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
