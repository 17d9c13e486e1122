"""
Data models for the LinkChecker crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

ERROR_BUCKET = "error"


class ErrorKind(str, Enum):
    """Classification of a fetch that produced no HTTP status."""

    NETWORK = "network"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A discovered, not yet visited link and the page that referenced it."""

    url: str
    found_on_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Response of a single fetch: status, body (HTML only) and redirects."""

    url: str
    status_code: int
    content_type: str = ""
    body: str = ""
    redirect_chain: Tuple[str, ...] = ()

    @property
    def final_url(self) -> str:
        return self.redirect_chain[-1] if self.redirect_chain else self.url


@dataclass(frozen=True, slots=True)
class CrawlOutcome:
    """Result of visiting one URL, successful or not."""

    url: str
    found_on_url: Optional[str]
    status_code: Optional[int] = None
    error: Optional[ErrorKind] = None
    redirect_chain: Tuple[str, ...] = ()

    @property
    def bucket(self) -> str:
        """Report key: the status code as text, or ``"error"``."""
        return ERROR_BUCKET if self.status_code is None else str(self.status_code)

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    def row(self) -> Dict[str, Optional[str]]:
        return {"foundOnUrl": self.found_on_url, "url": self.url}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class CrawlRun:
    """Metadata of one crawl run, used for the "last check" display."""

    base_url: str
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    def finish(self) -> None:
        if self.is_completed:
            raise RuntimeError("crawl run is already completed")
        self.completed_at = _utcnow()

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def is_stale(self, max_age: timedelta, now: Optional[datetime] = None) -> bool:
        """True when the run never finished or finished longer than *max_age* ago."""
        if not self.is_completed:
            return True
        return (now or _utcnow()) - self.completed_at > max_age

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CrawlRun:
        completed = data.get("completedAt")
        return cls(
            base_url=data["baseUrl"],
            started_at=datetime.fromisoformat(data["startedAt"]),
            completed_at=datetime.fromisoformat(completed) if completed else None,
        )
