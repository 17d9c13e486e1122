"""link_checker.report: Сохранение отчёта (JSON + CSV) и чтение последнего результата."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Tuple, Union

from link_checker.crawler.models import CrawlRun
from link_checker.exceptions import PersistenceError
from link_checker.logger import logger
from link_checker.report.atomic import commit, stage_text
from link_checker.report.csv_report import build_csv
from link_checker.report.json_report import build_json
from link_checker.reporter import CrawlReport

__all__ = ["ResultPersister", "build_json", "build_csv", "EMPTY_REPORT"]

EMPTY_REPORT = "{}"

JSON_NAME = "link-checker-last-result.json"
CSV_NAME = "link-checker-last-result.csv"
RUN_NAME = "link-checker-last-run.json"


class ResultPersister:
    """Пишет артефакты последнего запуска в ``output_dir``, заменяя предыдущие атомарно."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        *,
        json_name: str = JSON_NAME,
        csv_name: str = CSV_NAME,
        run_name: str = RUN_NAME,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.json_path = self.output_dir / json_name
        self.csv_path = self.output_dir / csv_name
        self.run_path = self.output_dir / run_name

    def persist(self, report: CrawlReport, run: CrawlRun) -> Tuple[Path, Path]:
        """
        Сохраняет полный JSON-отчёт, CSV битых ссылок и метаданные запуска.

        Все три файла сначала пишутся во временные, затем переименовываются
        подряд: JSON, CSV и последним файл запуска. Если переименование
        сорвалось, уже заменённые файлы возвращаются к прежнему содержимому.
        Любая ошибка ввода-вывода поднимается как PersistenceError.
        """
        staged: List[Tuple[Path, Path]] = []
        try:
            staged.append((stage_text(self.json_path, build_json(report)), self.json_path))
            staged.append((stage_text(self.csv_path, build_csv(report), newline=""), self.csv_path))
            staged.append((stage_text(self.run_path, json.dumps(run.to_dict())), self.run_path))
            commit(staged)
        except OSError as exc:
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise PersistenceError(f"cannot save report to {self.output_dir}: {exc}") from exc

        logger.info("Отчёт сохранён: %s, %s", self.json_path, self.csv_path)
        return self.json_path, self.csv_path

    def load_report(self) -> str:
        """Возвращает сохранённый JSON-отчёт или ``"{}"``, если его ещё нет."""
        try:
            text = self.json_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return EMPTY_REPORT
        return text if text.strip() else EMPTY_REPORT

    def load_run(self) -> Optional[CrawlRun]:
        """Метаданные последнего сохранённого запуска (для «Last check»)."""
        try:
            data = json.loads(self.run_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as exc:
            logger.warning("Повреждённый файл %s: %s", self.run_path, exc)
            return None
        return CrawlRun.from_dict(data)
