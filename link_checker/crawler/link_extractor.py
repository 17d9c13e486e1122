"""
Link extraction for LinkChecker.
"""
from __future__ import annotations

from typing import Iterator, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from link_checker.crawler.models import CrawlTarget
from link_checker.logger import logger

HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})
PAGINATION_RELS = frozenset({"next", "prev"})
_SKIP_PREFIXES = ("#",)


def is_html(content_type: Optional[str]) -> bool:
    """True for ``text/html`` and XHTML, ignoring parameters such as charset."""
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() in HTML_CONTENT_TYPES


def _href(tag: object) -> Optional[str]:
    if not isinstance(tag, Tag):
        return None
    value = tag.get("href")
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.startswith(_SKIP_PREFIXES):
        return None
    return value


def extract_links(body: str, content_type: Optional[str], source_url: str) -> Iterator[CrawlTarget]:
    """
    Yield outgoing links of an HTML page as CrawlTarget in document order.

    Non-HTML bodies yield nothing. Hrefs are yielded unresolved, except when
    the page declares ``<base href>``, in which case they are made absolute
    against it. Broken markup yields whatever anchors the parser recovers;
    markup the parser rejects outright yields nothing.
    """
    if not body or not is_html(content_type):
        return

    try:
        soup = BeautifulSoup(body, "html.parser")
    except ParserRejectedMarkup as exc:
        logger.debug("Unparsable HTML on %s: %s", source_url, exc)
        return

    base_href = _href(soup.find("base", href=True))
    resolve_against = None
    if base_href:
        resolve_against = urljoin(source_url, base_href)

    for tag in soup.find_all(["a", "link"], href=True):
        if tag.name == "link":
            rels = {r.lower() for r in (tag.get("rel") or [])}
            if not rels & PAGINATION_RELS:
                continue
        href = _href(tag)
        if href is None:
            continue
        if resolve_against:
            href = urljoin(resolve_against, href)
        yield CrawlTarget(url=href, found_on_url=source_url)
