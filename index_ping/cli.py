# === FILE: index_ping/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для IndexPing через командную строку.

Команды:
  submit URL...   Отправить указанные URL нотификатору
  submit-all      Обойти sitemap и отправить все найденные URL
  crawl           Только обойти sitemap и вывести найденные URL
  key             Показать ключ для файла проверки
  config          Показать текущую конфигурацию
  serve           Запустить HTTP-сервер с эндпоинтами /api/indexnow/*

Общие опции:
  --config PATH       YAML/JSON-файл с ключами SITE_URL, INDEXNOW_KEY, ... (по умолчанию: окружение)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Коды выхода: 0: успех; 1: фатальная ошибка; 2: часть батчей не принята.

Пример:
  index-ping submit https://example.com/blog/post --mode created --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from aiohttp import web

from index_ping import __version__
from index_ping.config import load_config
from index_ping.crawler import crawl_sitemaps
from index_ping.engine import submit_entire_sitemap, submit_explicit_urls
from index_ping.errors import IndexPingError
from index_ping.logger import init_logging
from index_ping.models import SubmissionMode
from index_ping.report import render_html, render_json
from index_ping.web import create_app

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
EXIT_PARTIAL = 2


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(ctx):
    try:
        return load_config(ctx.obj['source'])
    except IndexPingError as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


def _emit_result(result, json_output, html_output, template_dir, pretty):
    """Печатает результат в stdout или сохраняет отчёты; завершает с кодом 2 при частичном провале."""
    if not json_output and not html_output:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if pretty else None))
    if json_output:
        try:
            click.echo(f'JSON report: {render_json(result, json_output)}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    if html_output:
        try:
            click.echo(f'HTML report: {render_html(result, template_dir, html_output)}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')
    if result.failed_batches:
        sys.exit(EXIT_PARTIAL)


def report_options(func):
    func = click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')(func)
    func = click.option(
        '--template', '-t', 'template_dir',
        default=None,
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help='Папка с Jinja2-шаблонами (по умолчанию встроенная)'
    )(func)
    func = click.option(
        '--html', 'html_output',
        default=None,
        type=click.Path(writable=True, dir_okay=False, path_type=Path),
        help='Сохранить HTML-отчёт в файл'
    )(func)
    func = click.option(
        '--json', '-j', 'json_output',
        default=None,
        type=click.Path(writable=True, dir_okay=False, path_type=Path),
        help='Сохранить JSON-отчёт в файл'
    )(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='IndexPing, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON-файл конфигурации (по умолчанию: переменные окружения).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд IndexPing CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['source'] = config_path


@cli.command('submit', context_settings=CONTEXT_SETTINGS)
@click.argument('urls', nargs=-1, required=True)
@click.option(
    '--mode', '-m', 'mode',
    default=SubmissionMode.UPDATED.value, show_default=True,
    type=click.Choice([m.value for m in SubmissionMode]),
    help='Характер изменения контента'
)
@report_options
@click.pass_context
def submit(ctx, urls, mode, json_output, html_output, template_dir, pretty):
    """Отправить указанные URL нотификатору."""
    cfg = _load(ctx)
    try:
        result = asyncio.run(submit_explicit_urls(list(urls), mode, config=cfg))
    except IndexPingError as e:
        print_error(f'Ошибка при отправке: {e}')
    _emit_result(result, json_output, html_output, template_dir, pretty)


@cli.command('submit-all', context_settings=CONTEXT_SETTINGS)
@report_options
@click.option(
    '--run-timeout', 'run_timeout',
    type=float,
    default=None,
    help='Таймаут всей операции (секунд)'
)
@click.pass_context
def submit_all(ctx, json_output, html_output, template_dir, pretty, run_timeout):
    """Обойти sitemap и отправить все найденные URL."""
    cfg = _load(ctx)
    click.echo(f'Crawling {cfg.sitemap_entry_url}', err=True)
    try:
        if run_timeout:
            result = asyncio.run(
                asyncio.wait_for(submit_entire_sitemap(config=cfg), timeout=run_timeout)
            )
        else:
            result = asyncio.run(submit_entire_sitemap(config=cfg))
    except asyncio.TimeoutError:
        print_error(f'Операция не завершена за {run_timeout} секунд')
    except IndexPingError as e:
        print_error(f'Ошибка при отправке sitemap: {e}')
    _emit_result(result, json_output, html_output, template_dir, pretty)


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def crawl(ctx, pretty):
    """Обойти sitemap и вывести найденные URL без отправки."""
    cfg = _load(ctx)
    try:
        urls = asyncio.run(crawl_sitemaps(cfg.sitemap_entry_url, timeout=cfg.request_timeout))
    except IndexPingError as e:
        print_error(f'Ошибка при обходе sitemap: {e}')
    click.echo(json.dumps(urls, ensure_ascii=False, indent=2 if pretty else None))


@cli.command('key', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_key(ctx):
    """Показать ключ (содержимое файла проверки)."""
    click.echo(_load(ctx).shared_key)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = _load(ctx)
    data = cfg.model_dump()
    if data['admin_token']:
        data['admin_token'] = '***'
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default='127.0.0.1', show_default=True, help='Адрес для прослушивания')
@click.option('--port', default=8080, show_default=True, type=int, help='Порт')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-сервер с эндпоинтами IndexNow."""
    _load(ctx)
    web.run_app(create_app(ctx.obj['source']), host=host, port=port, print=None)


if __name__ == "__main__":
    cli()
