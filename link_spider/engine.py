"""link_spider.engine: запуск обхода до завершения и сбор отчёта."""

from __future__ import annotations

from link_spider.aggregator import CrawlReport
from link_spider.config import CrawlerConfig
from link_spider.crawler.crawler import Crawler
from link_spider.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(cfg: CrawlerConfig, url: str) -> CrawlReport:
    """
    Обходит сайт начиная с url и возвращает агрегированный отчёт.

    Parameters
    ----------
    cfg : CrawlerConfig
        Конфигурация обхода.
    url : str
        Стартовый адрес.
    """
    async with Crawler(cfg) as crawler:
        report = await crawler.run(url)
    logger.info("Pages: %d ok, %d failed", len(report.pages), len(report.failures))
    return report
