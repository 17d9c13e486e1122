"""link_checker.utils: Нормализация и сравнение URL."""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import urljoin, urlsplit, urlunsplit

from link_checker.exceptions import InvalidUrl
from link_checker.logger import logger

__all__: Sequence[str] = ("SUPPORTED_SCHEMES", "DEFAULT_PORTS", "normalize_url", "extract_host", "same_host")

SUPPORTED_SCHEMES = frozenset({"http", "https"})
DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """Приводит URL к каноническому виду, пригодному как ключ дедупликации.

    Относительные ссылки разрешаются относительно ``base_url`` (страницы, на
    которой они найдены). Схема и хост приводятся к нижнему регистру, порт по
    умолчанию и фрагмент удаляются, завершающий слеш снимается у URL без
    query-строки (корень ``/`` сохраняется). Query-строка остаётся как есть.

    Raises:
        InvalidUrl: пустая строка, неподдерживаемая схема, нет хоста или порт
            не разбирается.
    """
    if url is None or not url.strip():
        raise InvalidUrl("empty URL")

    raw = url.strip()
    absolute = urljoin(base_url, raw) if base_url else raw

    try:
        parts = urlsplit(absolute)
        port = parts.port
    except ValueError as exc:
        raise InvalidUrl(f"malformed URL {raw!r}: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidUrl(f"unsupported scheme in {raw!r}")

    host = parts.hostname
    if not host:
        raise InvalidUrl(f"missing host in {raw!r}")
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = parts.path or "/"
    if not parts.query and path != "/":
        path = path.rstrip("/") or "/"

    normalized = urlunsplit((scheme, netloc, path, parts.query, ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def extract_host(url: str) -> str:
    """Возвращает хост URL в нижнем регистре (без порта)."""
    return (urlsplit(url).hostname or "").lower()


def same_host(url: str, other: str) -> bool:
    """True, если оба URL указывают на один и тот же хост."""
    return extract_host(url) == extract_host(other)
