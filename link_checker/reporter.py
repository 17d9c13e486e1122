"""link_checker.reporter: Накопление результатов обхода в отчёт по HTTP-статусам."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Tuple, TypedDict

from link_checker.crawler.models import ERROR_BUCKET, CrawlOutcome
from link_checker.logger import logger

__all__ = [
    "ReportRow",
    "CrawlReport",
    "CrawlObserver",
    "CrawlReporter",
    "aggregate_outcomes",
    "is_failing_bucket",
]


class ReportRow(TypedDict):
    """Одна строка отчёта: страница, где найдена ссылка, и сама ссылка."""

    foundOnUrl: Optional[str]
    url: str


def is_failing_bucket(key: str) -> bool:
    """Корзина считается проблемной, если это не 2xx (включая ``"error"``)."""
    return not (key.isdigit() and 200 <= int(key) < 300)


@dataclass(frozen=True)
class CrawlReport:
    """Неизменяемый снимок отчёта: статус (или ``"error"``) -> строки в порядке завершения."""

    buckets: Mapping[str, Tuple[ReportRow, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {key: tuple(rows) for key, rows in self.buckets.items()}
        object.__setattr__(self, "buckets", MappingProxyType(frozen))

    def __len__(self) -> int:
        return sum(len(rows) for rows in self.buckets.values())

    def __contains__(self, key: object) -> bool:
        return key in self.buckets

    def __getitem__(self, key: str) -> Tuple[ReportRow, ...]:
        return self.buckets[key]

    def keys(self) -> Iterable[str]:
        return self.buckets.keys()

    @property
    def total(self) -> int:
        return len(self)

    def to_dict(self) -> Dict[str, List[ReportRow]]:
        return {key: [dict(row) for row in rows] for key, rows in self.buckets.items()}  # type: ignore[misc]

    def failing_rows(self) -> Iterator[ReportRow]:
        """Строки всех не-2xx корзин, корзина за корзиной."""
        for key, rows in self.buckets.items():
            if is_failing_bucket(key):
                yield from rows

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[Mapping[str, Optional[str]]]]) -> CrawlReport:
        buckets = {
            str(key): tuple(
                ReportRow(foundOnUrl=row.get("foundOnUrl"), url=str(row["url"])) for row in rows
            )
            for key, rows in data.items()
        }
        return cls(buckets)


class CrawlObserver(Protocol):
    """Получатель результатов обхода."""

    def on_outcome(self, outcome: CrawlOutcome) -> None: ...


class CrawlReporter:
    """Потокобезопасный накопитель результатов, сгруппированных по статусу."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: Dict[str, List[ReportRow]] = {}
        self._count = 0

    def on_outcome(self, outcome: CrawlOutcome) -> None:
        row = ReportRow(foundOnUrl=outcome.found_on_url, url=outcome.url)
        with self._lock:
            self._buckets.setdefault(outcome.bucket, []).append(row)
            self._count += 1

        if outcome.bucket == ERROR_BUCKET:
            kind = outcome.error.value if outcome.error else ERROR_BUCKET
            logger.warning("%s: %s (found on %s)", kind, outcome.url, outcome.found_on_url)
        elif outcome.is_success:
            logger.debug("%s: %s", outcome.status_code, outcome.url)
        else:
            logger.warning("%s: %s (found on %s)", outcome.status_code, outcome.url, outcome.found_on_url)

    @property
    def outcomes(self) -> int:
        return self._count

    def finalize(self) -> CrawlReport:
        """Снимок накопленного отчёта; дальнейшие on_outcome на него не влияют."""
        with self._lock:
            return CrawlReport({key: tuple(rows) for key, rows in self._buckets.items()})


def aggregate_outcomes(outcomes: Iterable[CrawlOutcome]) -> CrawlReport:
    """Собирает отчёт из последовательности результатов."""
    reporter = CrawlReporter()
    for outcome in outcomes:
        reporter.on_outcome(outcome)
    return reporter.finalize()
