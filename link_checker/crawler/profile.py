"""
Crawl profiles: which discovered URLs are eligible for a visit.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from link_checker.utils import SUPPORTED_SCHEMES, extract_host

__all__ = ("ProfileKind", "CrawlProfile", "should_visit")


class ProfileKind(str, Enum):
    ALL_URLS = "all_urls"
    INTERNAL_ONLY = "internal_only"


@dataclass(frozen=True, slots=True)
class CrawlProfile:
    """Tagged variant: ``ALL_URLS`` or ``INTERNAL_ONLY`` with a host filter."""

    kind: ProfileKind = ProfileKind.ALL_URLS
    host: Optional[str] = None

    @classmethod
    def all_urls(cls) -> CrawlProfile:
        return cls(ProfileKind.ALL_URLS)

    @classmethod
    def internal_only(cls, base_url: Optional[str] = None) -> CrawlProfile:
        return cls(ProfileKind.INTERNAL_ONLY, extract_host(base_url) if base_url else None)

    @classmethod
    def for_config(cls, crawl_external: bool, base_url: str) -> CrawlProfile:
        return cls.all_urls() if crawl_external else cls.internal_only(base_url)

    @property
    def allows_external(self) -> bool:
        return self.kind is ProfileKind.ALL_URLS


def should_visit(profile: CrawlProfile, normalized_url: str, base_url: str) -> bool:
    """Decide whether *normalized_url* may be queued under *profile*."""
    parts = urlsplit(normalized_url)
    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not parts.hostname:
        return False
    if profile.kind is ProfileKind.ALL_URLS:
        return True
    host = profile.host or extract_host(base_url)
    return parts.hostname.lower() == host
