# File: link_checker/engine.py
"""link_checker.engine: Orchestration layer: запуск проверки, сохранение и чтение отчёта."""

from __future__ import annotations

import asyncio
from typing import Optional

from link_checker.config import CheckerConfig, load_config
from link_checker.crawler.crawler import LinkCrawler
from link_checker.crawler.models import CrawlRun
from link_checker.exceptions import ConfigurationError, PersistenceError
from link_checker.logger import logger
from link_checker.report import ResultPersister
from link_checker.reporter import CrawlReport, CrawlReporter

__all__ = ["Engine", "ACK"]

ACK = "ok"


class Engine:
    """Фасад для CLI и внешних вызывающих: запуск обхода и доступ к последнему отчёту."""

    @staticmethod
    def load_config(path: Optional[str]) -> CheckerConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        persister: Optional[ResultPersister] = None,
    ) -> None:
        """Инициализирует Engine; артефакты пишутся в ``config.output_dir``."""
        self.config = config or CheckerConfig()
        self.persister = persister or ResultPersister(self.config.output_dir)
        self.last_report: Optional[CrawlReport] = None
        self.last_run: Optional[CrawlRun] = None

    def resolve_base_url(
        self, base_url: Optional[str] = None, test_url_override: Optional[str] = None
    ) -> str:
        """URL для тестов важнее явно переданного, тот важнее конфига."""
        url = test_url_override or base_url or (str(self.config.base_url) if self.config.base_url else None)
        if not url:
            raise ConfigurationError("base URL is not set")
        return url

    async def crawl(
        self, base_url: Optional[str] = None, test_url_override: Optional[str] = None
    ) -> CrawlReport:
        """Обходит сайт, сохраняет отчёт и возвращает его снимок."""
        url = self.resolve_base_url(base_url, test_url_override)
        profile = self.config.profile(url)
        reporter = CrawlReporter()
        crawler = LinkCrawler(
            url,
            observer=reporter,
            profile=profile,
            options=self.config.fetch_options(profile),
        )

        run = await crawler.crawl()
        self.last_report = reporter.finalize()
        self.last_run = run
        self._persist()
        return self.last_report

    def run_crawl(
        self, base_url: Optional[str] = None, test_url_override: Optional[str] = None
    ) -> str:
        """Синхронный запуск для внешнего триггера; возвращает подтверждение ``"ok"``."""
        logger.info("Starting crawl…")
        asyncio.run(self.crawl(base_url, test_url_override))
        return ACK

    def retry_persist(self) -> str:
        """Повторно сохраняет последний отчёт после PersistenceError."""
        if self.last_report is None or self.last_run is None:
            raise RuntimeError("no completed crawl to persist")
        self._persist()
        return ACK

    def get_last_report(self) -> str:
        """JSON последнего сохранённого отчёта или ``"{}"``."""
        return self.persister.load_report()

    def get_last_run(self) -> Optional[CrawlRun]:
        return self.persister.load_run()

    def _persist(self) -> None:
        assert self.last_report is not None and self.last_run is not None
        try:
            self.persister.persist(self.last_report, self.last_run)
        except PersistenceError as exc:
            logger.error("Saving report failed: %s", exc)
            raise
