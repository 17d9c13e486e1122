"""Логирование LinkChecker.

Один логгер ``LinkChecker`` на весь пакет::

    from link_checker.logger import logger
    logger.info("Старт обхода")

Консольный вывод идёт в stdout, файл (если задан) ротируется по 5 MiB,
хранится три архива. Перенастройка во время работы: :func:`configure`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "LinkChecker"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

# aiohttp and asyncio are chatty at DEBUG; keep them at WARNING unless we debug too
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("aiohttp.client", "aiohttp.internal", "asyncio")

_Level = Union[int, str]


def _build_handlers(log_file: Optional[Union[str, Path]], fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер ``LinkChecker``.

    level
        Уровень (``"DEBUG"``, ``logging.INFO`` ...).
    log_file
        Файл для логов; ``None`` означает только консоль.
    replace_handlers
        Закрыть и убрать ранее установленные обработчики.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for old in lg.handlers[:]:
            lg.removeHandler(old)
            old.close()
    for handler in _build_handlers(log_file, log_format):
        lg.addHandler(handler)
    lg.propagate = False

    third_party = logging.DEBUG if lg.level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party)
    return lg


def init_logging(
    level: _Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Вызывается CLI при старте; заменяет прежние обработчики."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
