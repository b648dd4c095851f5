from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Any, Callable, Generator, List, Mapping, Optional, Set, Union

from link_spider.aggregator import CrawlReport
from link_spider.config import CrawlerConfig, merge_options
from link_spider.crawler.executor import RateLimitedExecutor
from link_spider.crawler.fetcher import AiohttpTransport, Transport, TransportError
from link_spider.crawler.link_extractor import extract_links
from link_spider.crawler.models import (
    CrawlOptions,
    FailureCallback,
    FinishedCallback,
    PageResult,
    Response,
    SuccessCallback,
    WorkItem,
)

__all__ = ("Crawler", "CrawlSession")


class CrawlSession:
    """State of a single crawl: visited and in-flight addresses, executor, callbacks.

    Every fetch goes through the session's own :class:`RateLimitedExecutor`;
    the crawl is finished when the in-flight multiset drains to empty, at which
    point ``on_all_finished`` fires once and the executor is stopped.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        transport: Transport,
        *,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        on_all_finished: Optional[FinishedCallback] = None,
        visited: Optional[Set[str]] = None,
        owns_transport: bool = False,
        on_done: Optional[Callable[[CrawlSession], Any]] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.on_success = on_success
        self.on_failure = on_failure
        self.on_all_finished = on_all_finished
        self.visited: Set[str] = visited if visited is not None else set()
        self.executor = RateLimitedExecutor(config.max_requests_per_second)
        self.seed: Optional[str] = None
        self.logger = logging.getLogger("LinkSpider")
        self._in_flight: Counter[str] = Counter()
        self._fetching: Set[str] = set()
        self._tasks: Set[asyncio.Task[None]] = set()
        self._owns_transport = owns_transport
        self._on_done = on_done
        self._finished = False
        self._future: Optional[asyncio.Future[List[str]]] = None
        self._closing: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------ #
    # public
    # ------------------------------------------------------------------ #

    @property
    def done(self) -> bool:
        return self._finished

    @property
    def in_flight(self) -> int:
        """Submitted fetches whose completion has not been processed yet."""
        return sum(self._in_flight.values())

    def start(self, url: str) -> CrawlSession:
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self.seed = url
        self.executor.start()
        self.logger.info("Crawl started: %s (depth %d)", url, self.config.depth)
        self.visit(url, self.config.depth)
        if not self._in_flight:
            self._finish()
        return self

    def visit(self, url: str, depth: int) -> None:
        """Schedule a fetch of *url* unless the depth budget is spent or it was visited."""
        if depth == 0 or url in self.visited:
            return
        self._in_flight[url] += 1
        self.executor.submit(self._issue, WorkItem(url, depth))

    async def wait(self) -> List[str]:
        """Wait for the crawl to finish and return the visited addresses."""
        if self._future is None:
            raise RuntimeError("crawl session was not started")
        # shielded so a cancelled waiter does not cancel the crawl result
        visited = await asyncio.shield(self._future)
        if self._closing is not None:
            await self._closing
        return visited

    def __await__(self) -> Generator[Any, None, List[str]]:
        return self.wait().__await__()

    # ------------------------------------------------------------------ #
    # fetch lifecycle
    # ------------------------------------------------------------------ #

    def _issue(self, item: WorkItem) -> None:
        # the same address may be queued twice when two pages link to it
        # before its first fetch completes
        if item.url in self.visited or item.url in self._fetching:
            self.logger.debug("Skip duplicate fetch: %s", item.url)
            self._complete(item.url)
            return
        self._fetching.add(item.url)
        task = asyncio.get_running_loop().create_task(self._fetch(item))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    async def _fetch(self, item: WorkItem) -> None:
        url = item.url
        response: Optional[Response] = None
        error: Optional[TransportError] = None
        try:
            try:
                response = await self.transport.fetch(url, {"User-Agent": self.config.user_agent})
            except TransportError as exc:
                error = exc
            finally:
                # failed addresses are never retried within a crawl
                self.visited.add(url)
                self._fetching.discard(url)
            if error is None and response is not None and response.status == 200:
                self._succeeded(item, response)
            else:
                self._failed(url, response, error)
        finally:
            self._complete(url)

    def _succeeded(self, item: WorkItem, response: Response) -> None:
        self.logger.debug("Fetched %s (%d)", item.url, response.status)
        self._notify(
            self.on_success,
            PageResult(
                url=item.url,
                status=response.status,
                content=response.body,
                error=None,
                response=response,
                body=response.body,
            ),
        )
        for link in extract_links(item.url, response.body, self.config.ignore_relative):
            if self.config.should_crawl(link):
                self.visit(link, item.depth - 1)

    def _failed(self, url: str, response: Optional[Response], error: Optional[TransportError]) -> None:
        status = response.status if response is not None else None
        self.logger.warning("Failed %s: %s", url, error if error is not None else f"HTTP {status}")
        if self.on_failure is None:
            return
        self._notify(
            self.on_failure,
            PageResult(
                url=url,
                status=status,
                content=None,
                error=error,
                response=response,
                body=response.body if response is not None else None,
            ),
        )

    def _complete(self, url: str) -> None:
        self._in_flight[url] -= 1
        if self._in_flight[url] <= 0:
            del self._in_flight[url]
        if not self._in_flight:
            self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        if self._future is None:
            raise RuntimeError("crawl session was not started")
        self._finished = True
        visited = list(self.visited)
        self.logger.info("Crawl finished: %s, %d address(es) visited", self.seed, len(visited))
        self._notify(self.on_all_finished, visited)
        self.executor.stop()
        if self._on_done is not None:
            self._on_done(self)
        if self._owns_transport and isinstance(self.transport, AiohttpTransport):
            self._closing = asyncio.get_running_loop().create_task(self.transport.close())
        if not self._future.done():
            self._future.set_result(visited)

    def _notify(self, callback: Optional[Callable[[Any], Any]], payload: Any) -> None:
        if callback is None:
            return
        try:
            callback(payload)
        except Exception:
            self.logger.exception("Callback %r raised", callback)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error("Fetch task failed", exc_info=task.exception())


class Crawler:
    """Recursive link crawler.

    ``crawl()`` returns immediately with a :class:`CrawlSession`; results are
    delivered through the callbacks. Addresses visited by finished crawls are
    remembered and skipped by later ones until :meth:`forget_crawled`.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None, *, transport: Optional[Transport] = None) -> None:
        self.config = config or CrawlerConfig()
        self.transport = transport
        self.crawled: Set[str] = set()
        self.logger = logging.getLogger("LinkSpider")
        self._owns_transport = False
        self._sessions: Set[CrawlSession] = set()

    async def __aenter__(self) -> Crawler:
        if self.transport is None:
            self.transport = AiohttpTransport(timeout=self.config.timeout)
            self._owns_transport = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # crawl() does not block, so sessions may still be using the transport
        if self._sessions:
            await asyncio.gather(*(session.wait() for session in list(self._sessions)))
        if self._owns_transport and isinstance(self.transport, AiohttpTransport):
            await self.transport.close()
            self.transport = None
            self._owns_transport = False

    def configure(self, **options: Any) -> Crawler:
        self.config = merge_options(self.config, **options)
        return self

    def forget_crawled(self) -> Crawler:
        self.crawled.clear()
        return self

    def crawl(
        self,
        url: Union[str, CrawlOptions, Mapping[str, Any]],
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        on_all_finished: Optional[FinishedCallback] = None,
    ) -> CrawlSession:
        """Start crawling from *url*; must be called from a running event loop.

        *url* may also be a :class:`CrawlOptions` or a mapping with the keys
        ``url``, ``success``, ``failure`` and ``finished``.
        """
        # raises RuntimeError outside of a running loop
        asyncio.get_running_loop()
        if isinstance(url, CrawlOptions):
            options = url
        elif isinstance(url, Mapping):
            options = CrawlOptions(**url)
        else:
            options = CrawlOptions(url, on_success, on_failure, on_all_finished)

        transport = self.transport
        owns_transport = transport is None
        if transport is None:
            transport = AiohttpTransport(timeout=self.config.timeout)

        session = CrawlSession(
            self.config,
            transport,
            on_success=options.success,
            on_failure=options.failure,
            on_all_finished=options.finished,
            visited=set(self.crawled),
            owns_transport=owns_transport,
            on_done=self._session_finished,
        )
        self._sessions.add(session)
        return session.start(options.url)

    def _session_finished(self, session: CrawlSession) -> None:
        self.crawled.update(session.visited)
        self._sessions.discard(session)

    async def run(self, url: str) -> CrawlReport:
        """Crawl *url* to completion and collect the outcome into a report."""
        report = CrawlReport(seed=url)
        await self.crawl(url, report.add_success, report.add_failure, report.finish)
        return report
