"""link_spider.utils: мелкие утилиты для работы со ссылками."""

from __future__ import annotations

from typing import Collection, List, Sequence
from urllib.parse import urlparse

from link_spider.logger import logger

__all__: Sequence[str] = (
    "is_absolute_link",
    "same_host",
    "remove_duplicates",
)


def is_absolute_link(href: str) -> bool:
    """Ссылка записана в абсолютной форме (``scheme://...``)."""
    return "://" in href


def same_host(url: str, other: str) -> bool:
    """Проверяет, что оба URL указывают на один и тот же хост."""
    return urlparse(url).netloc.lower() == urlparse(other).netloc.lower()


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
