from __future__ import annotations

import asyncio
import time
from collections import deque
from enum import Enum
from typing import Deque, Dict, List, Optional, Set, Tuple

from link_checker.crawler.fetcher import Fetcher, FetchOptions
from link_checker.crawler.link_extractor import extract_links
from link_checker.crawler.models import CrawlOutcome, CrawlRun, CrawlTarget, ErrorKind
from link_checker.crawler.profile import CrawlProfile, should_visit
from link_checker.exceptions import ConfigurationError, FetchError, InvalidUrl
from link_checker.logger import logger
from link_checker.reporter import CrawlObserver
from link_checker.utils import normalize_url, same_host

__all__ = ("CrawlState", "LinkCrawler")

_Result = Tuple[Optional[CrawlOutcome], List[CrawlTarget]]


class CrawlState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"


class LinkCrawler:
    """
    Обход сайта с проверкой статуса каждой найденной ссылки.

    Очередь, множество посещённых URL и диспетчеризация принадлежат одному
    управляющему циклу; параллельно выполняются только загрузка и разбор
    страниц, не более ``options.max_concurrent`` одновременно.
    """

    def __init__(
        self,
        base_url: str,
        observer: CrawlObserver,
        profile: Optional[CrawlProfile] = None,
        options: Optional[FetchOptions] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        try:
            self.base_url = normalize_url(base_url)
        except InvalidUrl as exc:
            raise ConfigurationError(f"invalid base URL {base_url!r}: {exc}") from exc
        self.observer = observer
        self.profile = profile or CrawlProfile.all_urls()
        self.options = options or FetchOptions.for_profile(self.profile)
        self._fetcher = fetcher
        self.state = CrawlState.IDLE
        self.visited: Set[str] = set()
        self.queue: Deque[CrawlTarget] = deque()
        self.max_in_flight = 0
        self.run: Optional[CrawlRun] = None

    async def crawl(self) -> CrawlRun:
        """Обходит сайт до опустошения очереди и возвращает метаданные запуска."""
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"crawler already used (state={self.state.value})")

        if self._fetcher is not None:
            return await self._crawl(self._fetcher)
        async with Fetcher(self.options) as fetcher:
            return await self._crawl(fetcher)

    async def _crawl(self, fetcher: Fetcher) -> CrawlRun:
        self.run = CrawlRun(base_url=self.base_url)
        self.state = CrawlState.RUNNING
        logger.info("Старт обхода: %s (concurrency=%d)", self.base_url, self.options.max_concurrent)
        start = time.monotonic()

        self.queue.append(CrawlTarget(url=self.base_url, found_on_url=None))
        in_flight: Dict[asyncio.Task[_Result], str] = {}
        emitted = 0

        while self.queue or in_flight:
            while self.queue and len(in_flight) < self.options.max_concurrent:
                target = self.queue.popleft()
                url = self._admit(target)
                if url is None:
                    continue
                task = asyncio.create_task(self._visit(fetcher, url, target.found_on_url))
                in_flight[task] = url
            self.max_in_flight = max(self.max_in_flight, len(in_flight))

            if not in_flight:
                continue
            if not self.queue:
                self.state = CrawlState.DRAINING

            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                del in_flight[task]
                outcome, targets = task.result()
                if outcome is not None:
                    self.observer.on_outcome(outcome)
                    emitted += 1
                self.queue.extend(targets)
            if self.queue:
                self.state = CrawlState.RUNNING

        self.state = CrawlState.COMPLETED
        self.run.finish()
        duration = time.monotonic() - start
        logger.info(
            "Завершено: %d ссылок проверено, %d URL посещено за %.2f с",
            emitted,
            len(self.visited),
            duration,
        )
        return self.run

    def _admit(self, target: CrawlTarget) -> Optional[str]:
        """Normalize *target* and mark it visited; None when it must be skipped."""
        try:
            url = normalize_url(target.url, target.found_on_url)
        except InvalidUrl as exc:
            logger.debug("Dropped link on %s: %s", target.found_on_url, exc)
            return None
        if url in self.visited:
            return None
        if not should_visit(self.profile, url, self.base_url):
            logger.debug("Skipped by profile: %s", url)
            return None
        self.visited.add(url)
        return url

    async def _visit(self, fetcher: Fetcher, url: str, found_on: Optional[str]) -> _Result:
        if not await fetcher.is_allowed(url):
            logger.debug("Заблокировано robots.txt: %s", url)
            return None, []
        try:
            result = await fetcher.fetch(url)
        except FetchError as exc:
            logger.debug("Fetch failed (%s): %s", exc.kind.value, exc)
            return CrawlOutcome(url=url, found_on_url=found_on, error=exc.kind), []
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error while fetching %s", url)
            return CrawlOutcome(url=url, found_on_url=found_on, error=ErrorKind.NETWORK), []

        outcome = CrawlOutcome(
            url=url,
            found_on_url=found_on,
            status_code=result.status_code,
            redirect_chain=result.redirect_chain,
        )
        targets: List[CrawlTarget] = []
        # external pages are checked but not expanded
        if same_host(result.final_url, self.base_url):
            try:
                targets = list(extract_links(result.body, result.content_type, result.final_url))
            except Exception:  # noqa: BLE001
                logger.exception("Link extraction failed on %s", result.final_url)
        if found_on is None and outcome.is_success:
            # the crawl root is not a link; it is reported only when broken
            return None, targets
        return outcome, targets
