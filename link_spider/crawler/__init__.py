"""Crawl orchestration: rate-limited executor, traversal engine and their collaborators."""
from link_spider.crawler.crawler import Crawler, CrawlSession
from link_spider.crawler.executor import RateLimitedExecutor
from link_spider.crawler.fetcher import AiohttpTransport, Transport, TransportError
from link_spider.crawler.link_extractor import extract_links
from link_spider.crawler.models import CrawlOptions, PageResult, Response, WorkItem

__all__ = [
    "AiohttpTransport",
    "CrawlOptions",
    "CrawlSession",
    "Crawler",
    "PageResult",
    "RateLimitedExecutor",
    "Response",
    "Transport",
    "TransportError",
    "WorkItem",
    "extract_links",
]
