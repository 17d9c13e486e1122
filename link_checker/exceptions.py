"""link_checker.exceptions: Иерархия ошибок LinkChecker."""

from __future__ import annotations

from link_checker.crawler.models import ErrorKind

__all__ = [
    "LinkCheckerError",
    "InvalidUrl",
    "ConfigurationError",
    "FetchError",
    "NetworkError",
    "FetchTimeoutError",
    "PersistenceError",
]


class LinkCheckerError(Exception):
    """Базовая ошибка пакета."""


class InvalidUrl(LinkCheckerError, ValueError):
    """Ссылка некорректна или использует неподдерживаемую схему."""


class ConfigurationError(LinkCheckerError, ValueError):
    """Некорректный базовый URL или параметры запуска."""


class FetchError(LinkCheckerError):
    """Ошибка загрузки одного URL."""

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, url: str, message: str = "") -> None:
        super().__init__(f"{url}: {message}" if message else url)
        self.url = url


class NetworkError(FetchError):
    """Сбой соединения, TLS или слишком много редиректов."""

    kind = ErrorKind.NETWORK


class FetchTimeoutError(FetchError, TimeoutError):
    """Запрос не уложился в таймаут."""

    kind = ErrorKind.TIMEOUT


class PersistenceError(LinkCheckerError, OSError):
    """Не удалось сохранить отчёт на диск."""
