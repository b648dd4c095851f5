"""
Fetcher module: the HTTP transport the crawler submits its page requests to.
"""
from __future__ import annotations

import asyncio
from typing import Mapping, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_spider.crawler.models import Response

__all__ = ("Transport", "TransportError", "AiohttpTransport")


class TransportError(Exception):
    """A request failed before any HTTP response was received."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"{url}: {cause!r}")
        self.url = url
        self.cause = cause


class Transport(Protocol):
    async def fetch(self, url: str, headers: Mapping[str, str]) -> Response: ...


class AiohttpTransport:
    """Transport on top of :class:`aiohttp.ClientSession`.

    When no session is injected one is created on first use and owned by the
    transport, i.e. closed by :meth:`close`. Redirects are followed; the
    timeout applies to each request as a whole.
    """

    def __init__(self, session: Optional[ClientSession] = None, *, timeout: float = 10.0) -> None:
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout

    async def __aenter__(self) -> AiohttpTransport:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    def _get_session(self) -> ClientSession:
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout), raise_for_status=False)
            self._owns_session = True
        return self._session

    async def fetch(self, url: str, headers: Mapping[str, str]) -> Response:
        """
        GET *url* with *headers*.

        Any HTTP status is returned as a :class:`Response`; network-level
        problems raise :class:`TransportError`.
        """
        session = self._get_session()
        try:
            async with session.get(url, headers=dict(headers), allow_redirects=True) as resp:
                body = await resp.text(errors="replace")
                return Response(
                    url=str(resp.url),
                    status=resp.status,
                    body=body,
                    headers=dict(resp.headers),
                )
        except (ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(url, exc) from exc

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
