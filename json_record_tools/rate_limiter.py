"""Sliding-window rate limiter for calls to external APIs.

Each limiter owns a FIFO of pending calls and a single worker task that
drains it. A call is admitted only while fewer than `max_calls` admissions
fall inside the trailing window, and calls run one at a time, so the limiter
bounds both the call rate and concurrency (to 1).
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, Tuple

from .config import Settings, settings as default_settings
from .errors import ConfigurationError, RateLimiterError

logger = logging.getLogger(__name__)

IDLE = 'idle'
DRAINING = 'draining'

STATUS_NORMAL = 'normal'
STATUS_WARNING = 'warning'
STATUS_LIMITED = 'limited'

AsyncCall = Callable[[], Awaitable[Any]]


class RateLimiter:
    def __init__(self, max_calls: int, window_ms: int, courtesy_delay_ms: int = 100, name: str = 'api'):
        if not isinstance(max_calls, int) or max_calls <= 0:
            raise ConfigurationError(f"max_calls must be a positive integer, got {max_calls!r}")
        if not isinstance(window_ms, (int, float)) or window_ms <= 0:
            raise ConfigurationError(f"window_ms must be positive, got {window_ms!r}")
        if courtesy_delay_ms < 0:
            raise ConfigurationError(f"courtesy_delay_ms must not be negative, got {courtesy_delay_ms!r}")

        self.name = name
        self.max_calls = max_calls
        self.window_ms = window_ms
        self.courtesy_delay_ms = courtesy_delay_ms

        self._window = window_ms / 1000.0
        self._courtesy_delay = courtesy_delay_ms / 1000.0
        self._queue: Deque[Tuple[AsyncCall, asyncio.Future]] = deque()
        self._call_times: Deque[float] = deque()
        self._state = IDLE
        self._worker: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Future] = None

    def __repr__(self):
        return (
            f"RateLimiter(name={self.name!r}, max_calls={self.max_calls}, "
            f"window_ms={self.window_ms}, state={self._state})"
        )

    @property
    def state(self) -> str:
        return self._state

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def current_calls(self) -> int:
        """Admissions inside the trailing window right now."""
        now = self._now()
        return sum(1 for t in self._call_times if now - t < self._window)

    def enqueue(self, call: AsyncCall) -> asyncio.Future:
        """Queue a zero-argument coroutine function.

        Must be called from a running event loop; raises RuntimeError when no
        loop is running. The returned future settles with the call's own
        result or exception once it has been admitted and run. A call that
        ends cancelled leaves its future cancelled.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        # Queue push and the idle check happen in one synchronous step.
        self._queue.append((call, future))
        if self._state == IDLE:
            self._state = DRAINING
            self._worker = loop.create_task(self._drain())
        return future

    async def wait_idle(self) -> None:
        """Wait until everything queued so far has been processed."""
        while self._worker is not None:
            await asyncio.shield(self._worker)

    def _now(self) -> float:
        return time.monotonic()

    def _prune(self, now: float) -> None:
        while self._call_times and now - self._call_times[0] >= self._window:
            self._call_times.popleft()

    async def _wait_for_slot(self) -> None:
        # Expiries can cluster, so re-check after every wake.
        while True:
            now = self._now()
            self._prune(now)
            if len(self._call_times) < self.max_calls:
                return
            wait = self._call_times[0] + self._window - now
            logger.debug("%s: %d calls in window, waiting %.3fs", self.name, len(self._call_times), wait)
            await asyncio.sleep(max(wait, 0))

    async def _run(self, call: AsyncCall, future: asyncio.Future) -> None:
        # The call runs in its own task so a CancelledError raised by the call
        # stays apart from cancellation of the worker.
        task = asyncio.ensure_future(call())
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        if future.done():
            if not task.cancelled():
                task.exception()
            return
        if task.cancelled():
            logger.warning("%s: call was cancelled", self.name)
            future.cancel()
        elif task.exception() is not None:
            logger.warning("%s: call failed: %s", self.name, task.exception())
            future.set_exception(task.exception())
        else:
            future.set_result(task.result())

    async def _drain(self) -> None:
        try:
            while self._queue:
                await self._wait_for_slot()
                call, future = self._queue.popleft()
                if future.cancelled():
                    continue
                self._call_times.append(self._now())
                self._in_flight = future
                await self._run(call, future)
                self._in_flight = None
                if self._courtesy_delay:
                    await asyncio.sleep(self._courtesy_delay)
        except asyncio.CancelledError:
            logger.warning("%s: rate limiter cancelled with %d calls queued", self.name, len(self._queue))
            self._fail_pending(RateLimiterError(f"{self.name} rate limiter was cancelled"))
            raise
        except Exception as exc:
            logger.exception("%s: rate limiter stopped unexpectedly", self.name)
            self._fail_pending(RateLimiterError(f"{self.name} rate limiter stopped: {exc!r}"))
        finally:
            self._state = IDLE
            self._worker = None

    def _fail_pending(self, error: RateLimiterError) -> None:
        pending = []
        if self._in_flight is not None:
            pending.append(self._in_flight)
            self._in_flight = None
        while self._queue:
            pending.append(self._queue.popleft()[1])
        for future in pending:
            if not future.done():
                future.set_exception(error)


def status_for(limiter: RateLimiter) -> str:
    if limiter.current_calls >= limiter.max_calls:
        return STATUS_LIMITED
    if limiter.queue_length:
        return STATUS_WARNING
    return STATUS_NORMAL


def build_api_limiters(config: Optional[Settings] = None) -> Dict[str, RateLimiter]:
    """One independent limiter per external API."""
    config = config or default_settings
    limits = {
        'musicbrainz': config.musicbrainz_limit,
        'theaudiodb': config.theaudiodb_limit,
        'youtube': config.youtube_limit,
    }
    return {
        name: RateLimiter(
            max_calls=limit.max_calls,
            window_ms=limit.window_ms,
            courtesy_delay_ms=config.courtesy_delay_ms,
            name=name,
        )
        for name, limit in limits.items()
    }
