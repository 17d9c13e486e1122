# link_checker/report/json_report.py

"""
Генерация JSON-отчёта LinkChecker.

Документ: статус (или ``"error"``) -> список ``{"foundOnUrl", "url"}``.
"""
import json

from link_checker.reporter import CrawlReport


def build_json(report: CrawlReport, *, pretty: bool = False) -> str:
    """
    Сериализует отчёт report в JSON-строку.

    :param report: снимок CrawlReport
    :param pretty: отступ 2 пробела вместо компактной записи
    :return: JSON-текст для сохранения или вывода

    Пример:
    ```python
    from link_checker.report.json_report import build_json
    text = build_json(report, pretty=True)
    ```
    """
    return json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
