# link_spider/__init__.py
"""
LinkSpider package initializer.
Defines package version and exposes the crawler API.
"""
__version__ = "0.1.0"

from link_spider.config import CrawlerConfig, load_config
from link_spider.crawler import CrawlOptions, Crawler, CrawlSession, PageResult, RateLimitedExecutor

__all__ = [
    "__version__",
    "CrawlOptions",
    "CrawlSession",
    "Crawler",
    "CrawlerConfig",
    "PageResult",
    "RateLimitedExecutor",
    "load_config",
]
