"""
Модуль для загрузки и валидации конфигурации LinkChecker.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from link_checker.crawler.fetcher import (
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    FetchOptions,
)
from link_checker.crawler.profile import CrawlProfile

__all__ = ["CheckerConfig", "load_config", "DEFAULT_CONFIG_PATH"]


class CheckerConfig(BaseModel):
    """Конфигурация запуска проверки ссылок."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: Optional[HttpUrl] = Field(
        None, description="Корневой URL; если не задан, его передаёт вызывающий код."
    )
    concurrency: int = Field(DEFAULT_CONCURRENCY, ge=1, description="Одновременных запросов.")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Таймаут на один запрос (секунд).")
    crawl_external: bool = Field(True, description="Проверять ли ссылки на внешние хосты.")
    ignore_robots: bool = Field(True, description="Не учитывать robots.txt.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    output_dir: Path = Field(Path("."), description="Каталог для JSON/CSV отчётов.")

    def with_overrides(self, **overrides: Any) -> CheckerConfig:
        """Возвращает копию с заменёнными полями (None-значения пропускаются)."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return CheckerConfig(**data)

    def profile(self, base_url: str) -> CrawlProfile:
        return CrawlProfile.for_config(self.crawl_external, base_url)

    def fetch_options(self, profile: CrawlProfile) -> FetchOptions:
        return FetchOptions.for_profile(
            profile,
            timeout_seconds=self.timeout,
            max_concurrent=self.concurrency,
            ignore_robots_txt=self.ignore_robots,
            user_agent=self.user_agent,
        )


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CheckerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CheckerConfig.
    Без пути берёт configs/default.yaml, а если его нет, значения по умолчанию.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return CheckerConfig()
        path_obj = DEFAULT_CONFIG_PATH
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CheckerConfig(**data)
