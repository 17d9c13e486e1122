"""link_checker.report.csv_report: CSV-выгрузка битых (не-2xx) ссылок."""

from __future__ import annotations

import csv
import io

from link_checker.reporter import CrawlReport

CSV_HEADER = ("Found on", "URL")


def build_csv(report: CrawlReport) -> str:
    """Возвращает CSV с заголовком ``Found on,URL`` и строками не-2xx корзин."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in report.failing_rows():
        writer.writerow((row["foundOnUrl"] or "", row["url"]))
    return buffer.getvalue()

