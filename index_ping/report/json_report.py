# index_ping/report/json_report.py

"""
Генерация JSON-отчёта для проекта IndexPing.

Сериализация объекта SubmissionResult в файл.
"""
import json
from pathlib import Path

from index_ping.models import SubmissionResult


def render_json(result: SubmissionResult, output_path: Path | str) -> Path:
    """
    Сохраняет результат отправки в формате JSON по указанному пути.

    :param result: объект SubmissionResult
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from index_ping.report.json_report import render_json
    report_path = render_json(result, 'reports/submission.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    return output
