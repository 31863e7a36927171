# File: index_ping/report/html_report.py
"""index_ping.report.html_report: Генерация HTML-отчёта об отправке с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from index_ping.models import SubmissionResult

#: Шаблоны, поставляемые вместе с пакетом.
DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def render_html(
    result: SubmissionResult,
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        result: объект SubmissionResult.
        template_dir: директория с Jinja2-шаблонами (None: встроенные шаблоны).
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "result": result,
        "mode": result.mode.value,
        "failed_batches": result.failed_batches,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
