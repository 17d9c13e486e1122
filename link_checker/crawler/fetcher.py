"""
Fetcher module: bounded-concurrency HTTP requests with timeout, redirect
tracking and an optional robots.txt check.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector, TooManyRedirects

from link_checker.crawler.link_extractor import is_html
from link_checker.crawler.models import FetchResult
from link_checker.crawler.profile import CrawlProfile
from link_checker.crawler.robots import RobotsTxtRules
from link_checker.exceptions import FetchTimeoutError, NetworkError
from link_checker.logger import logger

DEFAULT_CONCURRENCY = 3
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = "LinkCheckerBot/1.0"


@dataclass(frozen=True)
class FetchOptions:
    """Per-run request options."""

    timeout_seconds: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    max_concurrent: int = DEFAULT_CONCURRENCY
    follow_redirects: bool = True
    track_redirect_chain: bool = True
    ignore_robots_txt: bool = True
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    @classmethod
    def for_profile(cls, profile: CrawlProfile, **kwargs) -> FetchOptions:
        """Options for *profile*: TLS is not verified when external hosts are crawled."""
        return replace(cls(**kwargs), verify_tls=not profile.allows_external)


class Fetcher:
    """Handles HTTP fetching for one crawl run.

    At most ``options.max_concurrent`` requests are in flight at once. Use as
    an async context manager when no session is supplied.
    """

    def __init__(self, options: FetchOptions, session: Optional[ClientSession] = None) -> None:
        self.options = options
        self.session = session
        self._owns_session = session is None
        self._semaphore = asyncio.Semaphore(options.max_concurrent)
        self._timeout = ClientTimeout(total=options.timeout_seconds)
        self._robots: Dict[str, Optional[RobotsTxtRules]] = {}
        self._robots_locks: Dict[str, asyncio.Lock] = {}

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": self.options.user_agent},
                connector=TCPConnector(ssl=self.options.verify_tls),
                raise_for_status=False,
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch *url* and return its status, HTML body and redirect chain.

        Raises FetchTimeoutError on timeout and NetworkError on any other
        transport failure, including exceeding ``max_redirects``.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")

        async with self._semaphore:
            try:
                return await self._get(url)
            except asyncio.TimeoutError as exc:
                raise FetchTimeoutError(url, f"no response within {self.options.timeout_seconds}s") from exc
            except TooManyRedirects as exc:
                raise NetworkError(url, f"more than {self.options.max_redirects} redirects") from exc
            except (ClientError, OSError) as exc:
                raise NetworkError(url, str(exc) or type(exc).__name__) from exc

    async def _get(self, url: str) -> FetchResult:
        assert self.session is not None
        async with self.session.get(
            url,
            allow_redirects=self.options.follow_redirects,
            max_redirects=self.options.max_redirects,
            timeout=self._timeout,
        ) as resp:
            ctype = resp.headers.get("Content-Type", "")
            body = await resp.text(errors="replace") if is_html(ctype) else ""
            chain: tuple[str, ...] = ()
            if self.options.track_redirect_chain and resp.history:
                chain = tuple(str(r.url) for r in resp.history[1:]) + (str(resp.url),)
            logger.debug("GET %s -> %s", url, resp.status)
            return FetchResult(
                url=url,
                status_code=resp.status,
                content_type=ctype,
                body=body,
                redirect_chain=chain,
            )

    async def is_allowed(self, url: str) -> bool:
        """robots.txt check; always True when the run ignores robots.txt."""
        if self.options.ignore_robots_txt:
            return True
        parts = urlsplit(url)
        origin = urlunsplit((parts.scheme, parts.netloc, "", "", ""))
        # robots.txt is loaded once per origin, under that origin's lock
        async with self._robots_locks.setdefault(origin, asyncio.Lock()):
            if origin not in self._robots:
                self._robots[origin] = await self._load_robots(origin)
        rules = self._robots[origin]
        if rules is None:
            return True
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return rules.can_fetch(self.options.user_agent, path)

    async def _load_robots(self, origin: str) -> Optional[RobotsTxtRules]:
        robots_url = f"{origin}/robots.txt"
        try:
            result = await self._fetch_text(robots_url)
        except (ClientError, OSError, asyncio.TimeoutError) as exc:
            logger.warning("Error loading robots.txt %s: %s", robots_url, exc)
            return None
        if result is None:
            return None
        return RobotsTxtRules(result)

    async def _fetch_text(self, url: str) -> Optional[str]:
        assert self.session is not None
        async with self._semaphore:
            async with self.session.get(url, timeout=self._timeout) as resp:
                if resp.status != 200:
                    logger.debug("robots.txt %s -> HTTP %s", url, resp.status)
                    return None
                return await resp.text(errors="replace")
