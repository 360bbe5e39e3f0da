"""Event registry: event status is what drives the job scheduler."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Protocol

from score_publisher.application.exceptions import NotFoundError, ValidationError
from score_publisher.application.policies.score_validation import is_valid_event_id
from score_publisher.application.uow import UnitOfWork
from score_publisher.domain.entities.event import Event
from score_publisher.domain.value_objects.enums import EventStatus

logger = logging.getLogger(__name__)


class JobControl(Protocol):
    async def start_job(self, event_id: str) -> None: ...
    async def stop_job(self, event_id: str) -> bool: ...
    def is_job_running(self, event_id: str) -> bool: ...
    def event_lock(self, event_id: str) -> asyncio.Lock: ...


async def add_event(
    event_id: str,
    status: EventStatus,
    uow: UnitOfWork,
    scheduler: JobControl,
) -> Event:
    """Store a new event; a LIVE event gets its poll job straight away."""
    if not is_valid_event_id(event_id):
        raise ValidationError("eventId must not be blank")

    now = datetime.now(timezone.utc)
    async with scheduler.event_lock(event_id):
        event = await uow.events_w.create(
            Event(event_id=event_id, status=status, created_at=now, updated_at=now)
        )
        await uow.commit()
        if event.is_live:
            await _start_job(scheduler, event_id)
    logger.info("Added event %s with status %s", event.event_id, event.status)
    return event


async def update_status(
    event_id: str,
    status: EventStatus,
    uow: UnitOfWork,
    scheduler: JobControl,
) -> Event:
    async with scheduler.event_lock(event_id):
        event = await uow.events_w.update_status(event_id, status)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        await uow.commit()
        if status == EventStatus.LIVE:
            await _start_job(scheduler, event_id)
        else:
            await scheduler.stop_job(event_id)
    logger.info("Event %s is now %s", event_id, status)
    return event


async def _start_job(scheduler: JobControl, event_id: str) -> None:
    try:
        await scheduler.start_job(event_id)
    except RuntimeError:
        # LIVE is already committed; resume_live_jobs picks it up on next start.
        logger.warning("Scheduler refused job for live event %s", event_id, exc_info=True)


async def find_by_id(event_id: str, uow: UnitOfWork) -> Event | None:
    return await uow.events.get_by_id(event_id)


async def get_event(event_id: str, uow: UnitOfWork) -> Event:
    event = await find_by_id(event_id, uow)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def resume_live_jobs(uow: UnitOfWork, scheduler: JobControl) -> list[str]:
    """Start a job for every event already stored as LIVE (process start-up)."""
    live = await uow.events.list_by_status(EventStatus.LIVE)
    for event in live:
        await scheduler.start_job(event.event_id)
    if live:
        logger.info("Resumed %d live event jobs", len(live))
    return [e.event_id for e in live]
