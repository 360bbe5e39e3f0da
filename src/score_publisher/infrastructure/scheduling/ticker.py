"""Fixed-rate, cancellable background timer on the running event loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

TickFunc = Callable[[], Awaitable[None]]


class Ticker:
    """Run ``func`` every ``interval`` seconds, first run after ``delay``.

    Each run is its own task: :meth:`cancel` stops future runs but leaves a
    run already in flight alone. A run is skipped while the previous one is
    still going. Exceptions from ``func`` are logged and never stop the ticker.
    """

    def __init__(
        self,
        func: TickFunc,
        *,
        interval: float,
        delay: float = 0.0,
        name: str = "ticker",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._func = func
        self._interval = interval
        self._delay = max(delay, 0.0)
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()
        self.runs = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError(f"{self._name} already started")
        self._task = asyncio.create_task(self._loop(), name=self._name)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_inflight(self) -> None:
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._delay
        while True:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            if self._inflight:
                logger.debug("%s: previous run still in flight, skipping", self._name)
            else:
                self._spawn()
            deadline += self._interval
            now = loop.time()
            if deadline < now:
                # fell behind; resume on the next slot instead of bursting
                missed = int((now - deadline) // self._interval) + 1
                deadline += missed * self._interval

    def _spawn(self) -> None:
        self.runs += 1
        task = asyncio.create_task(self._invoke(), name=f"{self._name}-run-{self.runs}")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _invoke(self) -> None:
        try:
            await self._func()
        except Exception:
            logger.exception("%s: run failed", self._name)
