# === FILE: index_ping/config.py ===
"""
Модуль для загрузки и валидации конфигурации IndexPing.

Источник «окружения»: ``os.environ``, произвольный mapping или YAML/JSON-файл
с теми же ключами (``SITE_URL``, ``INDEXNOW_KEY`` и т.д.).
Схема описана через Pydantic; объект конфигурации неизменяемый.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Union
from urllib.parse import urlsplit

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from index_ping.errors import ConfigError
from index_ping.utils import canonicalize_url, parse_https_url

DEFAULT_INDEXNOW_ENDPOINT = "https://api.indexnow.org/indexnow"
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_RETRY_COUNT = 2

SourceT = Union[Mapping[str, Any], str, Path, None]

_URL_FIELDS = ("site_origin", "key_verification_url", "notifier_endpoint", "sitemap_entry_url")


class IndexNowConfig(BaseModel):
    """Конфигурация одного запуска отправки."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    site_origin: str = Field(..., description="Канонический HTTPS-origin сайта без слеша в конце.")
    site_host: str = Field(..., min_length=1, description="Хост, передаваемый нотификатору.")
    shared_key: str = Field(..., min_length=1, description="Ключ, подтверждающий владение сайтом.")
    key_verification_url: str = Field(..., description="HTTPS-адрес файла с ключом.")
    notifier_endpoint: str = Field(DEFAULT_INDEXNOW_ENDPOINT, description="HTTPS-адрес API отправки.")
    sitemap_entry_url: str = Field(..., description="Корневой документ sitemap.")
    admin_token: str = Field("", description="Токен для защищённых HTTP-эндпоинтов.")
    request_timeout: float = Field(DEFAULT_REQUEST_TIMEOUT, gt=0, description="Таймаут одного запроса (секунд).")
    retry_count: int = Field(DEFAULT_RETRY_COUNT, ge=0, description="Число повторов батча при 5xx/сетевой ошибке.")

    @field_validator(*_URL_FIELDS)
    @classmethod
    def _require_https(cls, v: str) -> str:
        canonical = canonicalize_url(v)
        if canonical is None or not canonical.startswith("https://"):
            raise ValueError("must be an absolute https URL")
        return v

    @model_validator(mode="after")
    def _check_origin_shape(self) -> IndexNowConfig:
        if self.site_origin.endswith("/") or "#" in self.site_origin:
            raise ValueError("site_origin must not end with '/' or carry a fragment")
        return self


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _read_source(source: SourceT) -> Mapping[str, Any]:
    if source is None:
        return os.environ
    if isinstance(source, Mapping):
        return source

    path_obj = Path(source).expanduser().resolve()
    if not path_obj.is_file():
        raise ConfigError(f"Файл конфигурации не найден: {path_obj}")
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ConfigError(f"Неподдерживаемый формат конфига: {suffix}")


def _text(env: Mapping[str, Any], name: str) -> str:
    value = env.get(name)
    if value is None:
        return ""
    return str(value).strip()


def _number(env: Mapping[str, Any], name: str, kind: type, default: Any) -> Any:
    raw = _text(env, name)
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number") from exc


def _shared_key(env: Mapping[str, Any]) -> str:
    key = _text(env, "INDEXNOW_KEY")
    if not key:
        raise ConfigError("INDEXNOW_KEY is required")
    return key


def load_shared_key(source: SourceT = None) -> str:
    """Читает только ``INDEXNOW_KEY``; остальные ключи источника не проверяются."""
    return _shared_key(_read_source(source))


def load_config(source: SourceT = None) -> IndexNowConfig:
    """
    Читает источник и возвращает проверенный объект IndexNowConfig.
    Любая ошибка даёт ConfigError, сетевых запросов не выполняет.
    """
    env = _read_source(source)

    site_origin = parse_https_url(env.get("SITE_URL"), "SITE_URL").rstrip("/")
    site_host = urlsplit(site_origin).netloc.rpartition("@")[2]

    key = _shared_key(env)

    key_location = parse_https_url(
        _text(env, "INDEXNOW_KEY_LOCATION") or f"{site_origin}/{key}.txt",
        "INDEXNOW_KEY_LOCATION",
    )
    endpoint = parse_https_url(
        _text(env, "INDEXNOW_ENDPOINT") or DEFAULT_INDEXNOW_ENDPOINT,
        "INDEXNOW_ENDPOINT",
    )
    sitemap_url = parse_https_url(
        _text(env, "SITEMAP_URL") or f"{site_origin}/sitemap.xml",
        "SITEMAP_URL",
    )

    try:
        return IndexNowConfig(
            site_origin=site_origin,
            site_host=site_host,
            shared_key=key,
            key_verification_url=key_location,
            notifier_endpoint=endpoint,
            sitemap_entry_url=sitemap_url,
            admin_token=_text(env, "INDEXNOW_ADMIN_TOKEN"),
            request_timeout=_number(env, "INDEXNOW_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT),
            retry_count=_number(env, "INDEXNOW_RETRIES", int, DEFAULT_RETRY_COUNT),
        )
    except PydanticValidationError as exc:
        raise ConfigError(str(exc)) from exc
