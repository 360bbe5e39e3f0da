from __future__ import annotations

from contextlib import asynccontextmanager
from types import TracebackType
from typing import AsyncIterator, Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from score_publisher.infrastructure.db.repositories.event import (
    EventReaderRepo,
    EventWriterRepo,
)
from score_publisher.infrastructure.db.repositories.outbox import OutboxRepo
from score_publisher.infrastructure.db.session import AsyncSessionLocal


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.events = EventReaderRepo(session)
        self.events_w = EventWriterRepo(session)
        self.outbox = OutboxRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()


@asynccontextmanager
async def uow_scope(
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> AsyncIterator[SqlAlchemyUoW]:
    """One session, one UoW; rolled back if the block raises."""
    async with session_factory() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow
