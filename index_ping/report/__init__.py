# File: index_ping/report/__init__.py
"""index_ping.report: Отчёты об отправке (JSON и HTML), используемые CLI."""

from index_ping.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from index_ping.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
