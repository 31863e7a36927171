# File: index_ping/web.py
"""index_ping.web: HTTP-обработчики поверх оркестратора (aiohttp.web).

Маршруты:
  POST /api/indexnow/submit       {urls: string[], mode?}
  POST /api/indexnow/submit-all   обход sitemap + отправка
  POST /api/indexnow/blog-event   событие CMS: {action?, urls?, postUrl?, semesterId?, slug?, ...}
  GET  /api/indexnow/key          ключ в text/plain
  GET  /{key}.txt                 файл проверки ключа для нотификатора

POST-маршруты требуют заголовок ``X-IndexNow-Token`` равный ``INDEXNOW_ADMIN_TOKEN``.
"""

from __future__ import annotations

import hmac
import json
from typing import Any, Dict, Optional

from aiohttp import ClientSession, web

from index_ping import engine
from index_ping.config import IndexNowConfig, SourceT, load_config, load_shared_key
from index_ping.errors import ConfigError, ValidationError
from index_ping.logger import get_logger

__all__ = ["create_app", "ADMIN_TOKEN_HEADER"]

ADMIN_TOKEN_HEADER = "X-IndexNow-Token"

CONFIG_SOURCE: web.AppKey[Any] = web.AppKey("config_source", object)
HTTP_SESSION: web.AppKey[Optional[ClientSession]] = web.AppKey("http_session", object)

log = get_logger("web")
routes = web.RouteTableDef()


class _Reject(Exception):
    """Short-circuits a handler with a ready response."""

    def __init__(self, response: web.Response) -> None:
        super().__init__(response.status)
        self.response = response


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _config(request: web.Request) -> IndexNowConfig:
    try:
        return load_config(request.app[CONFIG_SOURCE])
    except ConfigError as exc:
        raise _Reject(_error(500, str(exc))) from exc


def _require_admin(request: web.Request, config: IndexNowConfig) -> None:
    if not config.admin_token:
        raise _Reject(_error(500, "INDEXNOW_ADMIN_TOKEN is not configured on the server"))
    provided = request.headers.get(ADMIN_TOKEN_HEADER, "")
    if not provided or not hmac.compare_digest(provided.encode(), config.admin_token.encode()):
        raise _Reject(_error(401, "Unauthorized"))


async def _json_body(request: web.Request) -> Dict[str, Any]:
    raw = await request.text()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise _Reject(_error(400, "Request body must be valid JSON")) from exc
    if not isinstance(body, dict):
        raise _Reject(_error(400, "Request body must be a JSON object"))
    return body


async def _admin_context(request: web.Request) -> IndexNowConfig:
    config = _config(request)
    _require_admin(request, config)
    return config


@web.middleware
async def _reject_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except _Reject as rejected:
        return rejected.response


@routes.post("/api/indexnow/submit")
async def submit_urls(request: web.Request) -> web.Response:
    config = await _admin_context(request)
    body = await _json_body(request)

    urls = body.get("urls")
    if not isinstance(urls, list):
        return _error(400, "Request body must include urls: string[]")

    try:
        result = await engine.submit_explicit_urls(
            urls, body.get("mode") or "updated", config=config, session=request.app[HTTP_SESSION]
        )
    except ValidationError as exc:
        return _error(400, str(exc))
    return web.json_response(result.to_dict())


@routes.post("/api/indexnow/submit-all")
async def submit_all(request: web.Request) -> web.Response:
    config = await _admin_context(request)
    try:
        result = await engine.submit_entire_sitemap(config=config, session=request.app[HTTP_SESSION])
    except Exception as exc:
        log.exception("submit-all failed")
        return _error(500, str(exc) or "Failed to submit sitemap URLs")
    return web.json_response(result.to_dict())


@routes.post("/api/indexnow/blog-event")
async def blog_event(request: web.Request) -> web.Response:
    config = await _admin_context(request)
    body = await _json_body(request)
    try:
        result = await engine.submit_blog_event(body, config=config, session=request.app[HTTP_SESSION])
    except ValidationError as exc:
        return _error(400, str(exc))
    return web.json_response(result.to_dict())


async def _serve_key(request: web.Request, requested: str) -> web.Response:
    try:
        shared_key = load_shared_key(request.app[CONFIG_SOURCE])
    except ConfigError as exc:
        return _error(500, str(exc))
    if requested and requested != shared_key:
        return web.Response(status=404, text="Not Found", content_type="text/plain", charset="utf-8")
    return web.Response(
        text=shared_key,
        content_type="text/plain",
        charset="utf-8",
        headers={"Cache-Control": "public, max-age=300"},
    )


@routes.get("/api/indexnow/key")
async def key(request: web.Request) -> web.Response:
    return await _serve_key(request, request.query.get("requestedKey", "").strip())


@routes.get("/{requested_key}.txt")
async def key_file(request: web.Request) -> web.Response:
    return await _serve_key(request, request.match_info["requested_key"].strip())


def create_app(source: SourceT = None, *, session: Optional[ClientSession] = None) -> web.Application:
    """Собирает приложение; конфигурация читается заново на каждый запрос."""
    app = web.Application(middlewares=[_reject_middleware])
    app[CONFIG_SOURCE] = source
    app[HTTP_SESSION] = session
    app.add_routes(routes)
    return app
