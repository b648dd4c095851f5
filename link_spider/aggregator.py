"""link_spider.aggregator: сбор результатов обхода в единый отчёт."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, List, Optional, TypedDict

if TYPE_CHECKING:
    from link_spider.crawler.models import PageResult


class PageInfo(TypedDict):
    """Успешно загруженная страница."""

    url: str
    status: int
    size: int


class FailureInfo(TypedDict):
    """Страница, которую не удалось загрузить."""

    url: str
    status: Optional[int]
    error: Optional[str]


@dataclass(slots=True)
class CrawlReport:
    """Результаты одного обхода.

    Методы ``add_success``, ``add_failure`` и ``finish`` имеют сигнатуры
    колбэков краулера, поэтому отчёт можно передать в ``crawl`` напрямую.
    """

    seed: str = ""
    pages: List[PageInfo] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)
    visited: List[str] = field(default_factory=list)

    def add_success(self, result: PageResult) -> None:
        self.pages.append(
            PageInfo(url=result.url, status=result.status or 200, size=len(result.content or ""))
        )

    def add_failure(self, result: PageResult) -> None:
        self.failures.append(
            FailureInfo(
                url=result.url,
                status=result.status,
                error=str(result.error) if result.error is not None else None,
            )
        )

    def finish(self, visited: List[str]) -> None:
        self.visited = sorted(visited)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)


__all__ = ["CrawlReport", "PageInfo", "FailureInfo"]
