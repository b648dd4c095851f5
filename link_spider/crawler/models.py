"""
Data models for the LinkSpider crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

SuccessCallback = Callable[["PageResult"], None]
FailureCallback = Callable[["PageResult"], None]
FinishedCallback = Callable[[List[str]], None]


@dataclass(slots=True)
class Response:
    """Raw response handed back by a transport."""

    url: str
    status: int
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class PageResult:
    """Payload passed to the success and failure callbacks.

    ``status`` is ``None`` when the transport failed before any response
    existed; ``content`` is only set for successful pages.
    """

    url: str
    status: Optional[int]
    content: Optional[str] = None
    error: Optional[BaseException] = None
    response: Optional[Response] = None
    body: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status == 200


@dataclass(slots=True)
class WorkItem:
    """A fetch waiting in the executor queue."""

    url: str
    depth: int


@dataclass(slots=True)
class CrawlOptions:
    """Single-record form of a crawl invocation."""

    url: str
    success: Optional[SuccessCallback] = None
    failure: Optional[FailureCallback] = None
    finished: Optional[FinishedCallback] = None


__all__ = (
    "CrawlOptions",
    "FailureCallback",
    "FinishedCallback",
    "PageResult",
    "Response",
    "SuccessCallback",
    "WorkItem",
)
