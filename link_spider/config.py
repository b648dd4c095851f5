"""
Загрузка и валидация конфигурации краулера LinkSpider.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_DEPTH = 2
DEFAULT_MAX_REQUESTS_PER_SECOND = 100
DEFAULT_USER_AGENT = "crawler/link-spider"
DEFAULT_TIMEOUT = 10.0


def crawl_everything(url: str) -> bool:
    """Default link filter: follow every discovered link."""
    return True


class CrawlerConfig(BaseModel):
    """Конфигурация одного запуска обхода (неизменяемая)."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    depth: int = Field(DEFAULT_DEPTH, description="Максимальная глубина рекурсии; 0 — не загружать даже seed.")
    ignore_relative: bool = Field(
        False, alias="ignoreRelative", description="Переходить только по абсолютным ссылкам."
    )
    user_agent: str = Field(
        DEFAULT_USER_AGENT, alias="userAgent", min_length=1, description="Заголовок User-Agent."
    )
    max_requests_per_second: float = Field(
        DEFAULT_MAX_REQUESTS_PER_SECOND,
        alias="maxRequestsPerSecond",
        gt=0,
        description="Лимит запросов в секунду.",
    )
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Таймаут на один запрос (секунд).")
    should_crawl: Callable[[str], bool] = Field(
        crawl_everything,
        alias="shouldCrawl",
        exclude=True,
        description="Предикат, фильтрующий найденные ссылки.",
    )

    @field_validator("depth", mode="after")
    @classmethod
    def _floor_depth(cls, v: int) -> int:
        return max(v, 0)


def _field_name(key: str) -> str:
    for name, info in CrawlerConfig.model_fields.items():
        if key == name or key == info.alias:
            return name
    raise ValueError(f"Неизвестная опция конфигурации: {key}")


def merge_options(config: CrawlerConfig, **options: Any) -> CrawlerConfig:
    """
    Возвращает новую конфигурацию с применёнными опциями.
    Ключи принимаются как в snake_case, так и в виде camelCase-алиасов;
    значения ``None`` игнорируются (остаётся текущее значение).
    """
    data: Dict[str, Any] = config.model_dump()
    data["should_crawl"] = config.should_crawl
    for key, value in options.items():
        if value is None:
            continue
        data[_field_name(key)] = value
    return CrawlerConfig(**data)


_DEFAULT_CFG = Path("configs/default.yaml")


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


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    Без явного пути берёт configs/default.yaml, а если его нет — значения по умолчанию.
    Явно указанный, но отсутствующий файл приводит к FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return CrawlerConfig(**data)
    except ValidationError:
        raise


__all__ = [
    "CrawlerConfig",
    "DEFAULT_DEPTH",
    "DEFAULT_MAX_REQUESTS_PER_SECOND",
    "DEFAULT_USER_AGENT",
    "crawl_everything",
    "load_config",
    "merge_options",
]
