from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from score_publisher.application.repositories.event import EventReader, EventWriter
from score_publisher.application.repositories.outbox import OutboxStore


class UnitOfWork(Protocol):
    events: EventReader
    events_w: EventWriter
    outbox: OutboxStore

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
