from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import List

import pytest
import pytest_asyncio
from aiohttp import web

from link_checker.config import CheckerConfig
from link_checker.crawler.models import CrawlOutcome, ErrorKind

ServeFn = Callable[..., Awaitable[str]]


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[ServeFn]:
    """
    Start aiohttp apps on free ports; yields ``serve(app, host="localhost") -> base URL``.
    All apps are shut down after the test.
    """
    runners: List[web.AppRunner] = []

    async def _serve(app: web.Application, host: str = "localhost") -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()
        runners.append(runner)
        return f"http://{host}:{port}"

    yield _serve

    for runner in reversed(runners):
        await runner.cleanup()


@pytest.fixture()
def config(tmp_path) -> CheckerConfig:
    """Return a basic valid CheckerConfig writing reports to tmp_path."""
    return CheckerConfig(timeout=2.0, output_dir=tmp_path)


@pytest.fixture()
def sample_outcomes() -> List[CrawlOutcome]:
    base = "http://example.test/"
    return [
        CrawlOutcome(url=base, found_on_url=None, status_code=200),
        CrawlOutcome(url="http://example.test/about", found_on_url=base, status_code=200),
        CrawlOutcome(url="http://example.test/missing", found_on_url=base, status_code=404),
        CrawlOutcome(url="http://example.test/slow", found_on_url=base, error=ErrorKind.TIMEOUT),
    ]
