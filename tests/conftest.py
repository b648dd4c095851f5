# File: tests/conftest.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Mapping, Optional, Tuple, Union

import pytest

from link_spider.config import CrawlerConfig
from link_spider.crawler.crawler import Crawler
from link_spider.crawler.fetcher import TransportError
from link_spider.crawler.models import Response
from link_spider.logger import LOGGER_NAME

Page = Union[Tuple[int, str], BaseException]


class FakeTransport:
    """In-memory transport: serves *pages* and records every request."""

    def __init__(self, pages: Dict[str, Page], delays: Optional[Dict[str, float]] = None) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.calls: List[str] = []
        self.headers: List[Dict[str, str]] = []

    async def fetch(self, url: str, headers: Mapping[str, str]) -> Response:
        self.calls.append(url)
        self.headers.append(dict(headers))
        await asyncio.sleep(self.delays.get(url, 0))
        page = self.pages.get(url)
        if page is None:
            return Response(url=url, status=404, body="Not Found")
        if isinstance(page, BaseException):
            raise TransportError(url, page)
        status, body = page
        return Response(url=url, status=status, body=body)


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests install handlers bound to CliRunner streams; drop them between tests."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture()
def make_crawler():
    """
    Build a Crawler backed by a FakeTransport.
    Returns a factory: ``make_crawler(pages, delays=None, **config_options)``.
    """

    def _make(pages: Dict[str, Page], delays: Optional[Dict[str, float]] = None, **options):
        options.setdefault("max_requests_per_second", 1000)
        transport = FakeTransport(pages, delays)
        return Crawler(CrawlerConfig(**options), transport=transport), transport

    return _make


@pytest.fixture()
def site_pages() -> Dict[str, Page]:
    """
    a.test -> b.test, a.test (self link)
    b.test -> c.test
    c.test -> d.test
    """
    return {
        "http://a.test/": (200, '<a href="http://b.test/">B</a> <a href="http://a.test/">home</a>'),
        "http://b.test/": (200, '<a href="http://c.test/">C</a>'),
        "http://c.test/": (200, '<a href="http://d.test/">D</a>'),
        "http://d.test/": (200, "<p>leaf</p>"),
    }
