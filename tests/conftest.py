"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator

import pytest

from score_publisher.application.dto.score import ScoreReading
from score_publisher.application.exceptions import ConflictError
from score_publisher.application.ports.provider import ScoreProviderError
from score_publisher.application.repositories.outbox import Claim
from score_publisher.domain.entities.event import Event
from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.domain.value_objects.enums import (
    EventStatus,
    MessageEventType,
    MessageStatus,
)
from score_publisher.services.outbox_service import OutboxService

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


def make_event(event_id: str = "E1", status: EventStatus = EventStatus.LIVE) -> Event:
    return Event(event_id=event_id, status=status, created_at=T0, updated_at=T0)


def make_message(
    *,
    event_id: str = "E1",
    score: str = "1:0",
    status: MessageStatus = MessageStatus.PENDING,
    retry_count: int = 0,
    created_at: datetime = T0,
    last_attempt_at: datetime | None = None,
    sent_at: datetime | None = None,
) -> OutboxMessage:
    return OutboxMessage(
        id=None,
        event_id=event_id,
        event_type=MessageEventType.EVENT_SCORE_UPDATE.value,
        payload={"eventId": event_id, "currentScore": score},
        status=status,
        created_at=created_at,
        sent_at=sent_at,
        retry_count=retry_count,
        last_attempt_at=last_attempt_at,
    )


@dataclass
class FakeEventReader:
    _store: dict[str, Event] = field(default_factory=dict)

    async def get_by_id(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    async def list_by_status(self, status: EventStatus) -> list[Event]:
        return [e for e in self._store.values() if e.status == status]


@dataclass
class FakeEventWriter:
    _reader: FakeEventReader

    async def create(self, event: Event) -> Event:
        if event.event_id in self._reader._store:
            raise ConflictError(f"Event {event.event_id} already exists")
        self._reader._store[event.event_id] = event
        return event

    async def update_status(self, event_id: str, status: EventStatus) -> Event | None:
        existing = self._reader._store.get(event_id)
        if existing is None:
            return None
        updated = replace(existing, status=status)
        self._reader._store[event_id] = updated
        return updated


@dataclass
class _Row:
    message: OutboxMessage
    claim_token: str | None = None
    claimed_until: datetime | None = None


@dataclass
class FakeOutboxStore:
    """In-memory outbox with the same guarded-update contract as OutboxRepo."""

    rows: dict[int, _Row] = field(default_factory=dict)
    _next_id: int = 1

    def seed(self, message: OutboxMessage) -> OutboxMessage:
        stored = replace(message, id=self._next_id)
        self.rows[self._next_id] = _Row(stored)
        self._next_id += 1
        return stored

    def current(self, message_id: int) -> OutboxMessage:
        return self.rows[message_id].message

    def all(self) -> list[OutboxMessage]:
        return [r.message for r in self.rows.values()]

    async def add(self, message: OutboxMessage, *, claim: Claim | None = None) -> OutboxMessage:
        stored = self.seed(message)
        if claim is not None:
            row = self.rows[stored.id]
            row.claim_token = claim.token
            row.claimed_until = claim.expires_at
        return stored

    async def fetch_pending(self) -> list[OutboxMessage]:
        pending = [m for m in self.all() if m.status == MessageStatus.PENDING]
        return sorted(pending, key=lambda m: (m.created_at, m.id))

    async def fetch_retryable(self, max_retries: int) -> list[OutboxMessage]:
        failed = [
            m for m in self.all()
            if m.status == MessageStatus.FAILED and m.retry_count < max_retries
        ]
        return sorted(failed, key=lambda m: (m.last_attempt_at or T0, m.id))

    async def list_by_status(self, status: MessageStatus, *, limit: int = 100) -> list[OutboxMessage]:
        matching = [m for m in self.all() if m.status == status]
        return sorted(matching, key=lambda m: (m.created_at, m.id), reverse=True)[:limit]

    async def claim(self, message: OutboxMessage, claim: Claim, now: datetime) -> bool:
        row = self.rows.get(message.id)
        if row is None:
            return False
        if row.message.status != message.status or row.message.retry_count != message.retry_count:
            return False
        if row.claimed_until is not None and row.claimed_until >= now:
            return False
        row.claim_token = claim.token
        row.claimed_until = claim.expires_at
        return True

    async def transition(self, previous: OutboxMessage, updated: OutboxMessage, token: str) -> bool:
        row = self.rows.get(previous.id)
        if row is None or row.claim_token != token or row.message.status != previous.status:
            return False
        row.message = updated
        row.claim_token = None
        row.claimed_until = None
        return True

    async def release(self, message_id: int, token: str) -> None:
        row = self.rows.get(message_id)
        if row is not None and row.claim_token == token:
            row.claim_token = None
            row.claimed_until = None


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    events: FakeEventReader = field(default_factory=FakeEventReader)
    events_w: FakeEventWriter | None = None
    outbox: FakeOutboxStore = field(default_factory=FakeOutboxStore)
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.events_w is None:
            self.events_w = FakeEventWriter(self.events)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@dataclass
class SlowCommitUoW(FakeUoW):
    """First commit yields to the loop for ``delay`` seconds before returning."""

    delay: float = 0.05

    async def commit(self) -> None:
        if self.commits == 0:
            self.commits += 1
            await asyncio.sleep(self.delay)
            return
        await super().commit()


def uow_factory_for(uow: FakeUoW):
    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return _factory


@dataclass
class FakePublisher:
    """Returns queued outcomes in order, then ``default``; records every call."""

    outcomes: list[bool | Exception] = field(default_factory=list)
    default: bool = True
    calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, topic: str, key: str, payload: dict[str, Any]) -> bool:
        self.calls.append((topic, key, payload))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@dataclass
class FakeProvider:
    readings: dict[str, ScoreReading | Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def fetch_score(self, event_id: str) -> ScoreReading:
        self.calls.append(event_id)
        result = self.readings.get(event_id)
        if result is None:
            raise ScoreProviderError(f"no score for {event_id}")
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class RecordingScheduler:
    started: list[str] = field(default_factory=list)
    stopped: list[str] = field(default_factory=list)
    running: set[str] = field(default_factory=set)
    refuse: bool = False
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict)

    async def start_job(self, event_id: str) -> None:
        if self.refuse:
            raise RuntimeError("scheduler is shut down")
        self.started.append(event_id)
        self.running.add(event_id)

    async def stop_job(self, event_id: str) -> bool:
        self.stopped.append(event_id)
        if event_id in self.running:
            self.running.discard(event_id)
            return True
        return False

    def is_job_running(self, event_id: str) -> bool:
        return event_id in self.running

    def running_jobs(self) -> list[str]:
        return sorted(self.running)

    def event_lock(self, event_id: str) -> asyncio.Lock:
        return self._locks.setdefault(event_id, asyncio.Lock())


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def outbox_service(publisher: FakePublisher, clock: FixedClock) -> OutboxService:
    return OutboxService(
        publisher,
        topic="event-scores",
        max_retries=5,
        claim_ttl=30.0,
        clock=clock,
    )
