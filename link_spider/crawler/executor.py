"""
Rate-limited executor: runs submitted callables one at a time, no faster than
a configured number per second.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

__all__ = ("RateLimitedExecutor",)

_Task = Tuple[Callable[..., Any], Tuple[Any, ...], Dict[str, Any]]


class RateLimitedExecutor:
    """Throttled FIFO task runner driven by an event-loop timer.

    Every cycle pops at most one task and runs it inline, then re-arms the
    timer ``1 / max_rate_per_second`` seconds later. The task's own duration
    is not subtracted from that delay, so slow tasks lower the effective rate
    below the ceiling.

    The queue is unbounded; :meth:`submit` never blocks or rejects work.
    """

    def __init__(self, max_rate_per_second: float) -> None:
        if max_rate_per_second <= 0:
            raise ValueError("max_rate_per_second must be > 0")
        self.max_rate_per_second = float(max_rate_per_second)
        self.interval: float = 1.0 / self.max_rate_per_second
        self._queue: Deque[_Task] = deque()
        self._stopped = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.Handle] = None
        self.logger = logging.getLogger("LinkSpider")

    @property
    def pending(self) -> int:
        """Number of tasks still waiting in the queue."""
        return len(self._queue)

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def submit(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``func(*args, **kwargs)`` for a later cycle."""
        self._queue.append((func, args, kwargs))

    def start(self) -> None:
        """Bind to the running loop and schedule the first cycle as soon as possible."""
        if self._loop is not None:
            raise RuntimeError("executor already started")
        self._loop = asyncio.get_running_loop()
        self.logger.debug("Executor started: %.3f s between tasks", self.interval)
        self._timer = self._loop.call_soon(self._process_queue_item)

    def stop(self) -> None:
        """Ask the drain loop to exit after its current cycle.

        Tasks still queued at that point are never executed.
        """
        self._stopped = True

    def _process_queue_item(self) -> None:
        loop = self._loop
        if loop is None:
            raise RuntimeError("executor was not started")
        started = loop.time()
        self._timer = None
        try:
            if self._queue:
                func, args, kwargs = self._queue.popleft()
                func(*args, **kwargs)
        finally:
            # a failing task aborts only its own cycle
            if self._stopped:
                if self._queue:
                    self.logger.debug("Executor stopped, %d queued task(s) dropped", len(self._queue))
            else:
                self._timer = loop.call_at(started + self.interval, self._process_queue_item)
