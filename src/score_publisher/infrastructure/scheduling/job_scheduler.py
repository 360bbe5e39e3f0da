"""Per-event recurring poll jobs."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from score_publisher.infrastructure.scheduling.ticker import Ticker

logger = logging.getLogger(__name__)

EventJob = Callable[[str], Awaitable[None]]

JOB_NAME_PREFIX = "event-job-"


@dataclass(slots=True)
class ScheduledJob:
    event_id: str
    ticker: Ticker

    @property
    def active(self) -> bool:
        return self.ticker.running

    def cancel(self) -> None:
        self.ticker.cancel()


class JobScheduler:
    """Keeps at most one active recurring job per event id.

    The registry is owned by this instance and only mutated under
    ``self._lock``, so start (stop-old-then-register-new) and stop are atomic
    per scheduler. Job runs share one event loop and are bounded by a
    semaphore of ``max_concurrency``.
    """

    def __init__(
        self,
        job: EventJob,
        *,
        interval: float = 10.0,
        initial_delay: float = 1.0,
        max_concurrency: int = 32,
    ) -> None:
        self._job = job
        self._interval = interval
        self._initial_delay = initial_delay
        self._jobs: dict[str, ScheduledJob] = {}
        self._lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._event_locks: dict[str, asyncio.Lock] = {}
        self._closed = False

    def event_lock(self, event_id: str) -> asyncio.Lock:
        """Per-event lock held by callers that change an event's stored status
        together with its job, so those pairs apply in commit order."""
        lock = self._event_locks.get(event_id)
        if lock is None:
            lock = self._event_locks[event_id] = asyncio.Lock()
        return lock

    async def start_job(self, event_id: str) -> None:
        async with self._lock:
            if self._closed:
                raise RuntimeError("scheduler is shut down")
            self._stop_locked(event_id)

            async def _run() -> None:
                async with self._semaphore:
                    await self._job(event_id)

            ticker = Ticker(
                _run,
                interval=self._interval,
                delay=self._initial_delay,
                name=f"{JOB_NAME_PREFIX}{event_id}",
            )
            ticker.start()
            self._jobs[event_id] = ScheduledJob(event_id=event_id, ticker=ticker)
        logger.info("Started scheduled job for event %s", event_id)

    async def stop_job(self, event_id: str) -> bool:
        async with self._lock:
            stopped = self._stop_locked(event_id)
        if stopped:
            logger.info("Stopped scheduled job for event %s", event_id)
        return stopped

    def is_job_running(self, event_id: str) -> bool:
        job = self._jobs.get(event_id)
        return job is not None and job.active

    def running_jobs(self) -> list[str]:
        return sorted(eid for eid, job in self._jobs.items() if job.active)

    async def shutdown(self) -> None:
        async with self._lock:
            self._closed = True
            jobs = list(self._jobs.values())
            self._jobs.clear()
            for job in jobs:
                job.cancel()
        logger.info("Job scheduler shut down (%d jobs cancelled)", len(jobs))

    def _stop_locked(self, event_id: str) -> bool:
        job = self._jobs.pop(event_id, None)
        if job is None:
            return False
        job.cancel()
        return True
