"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, Request

from score_publisher.infrastructure.db.session import AsyncSessionLocal
from score_publisher.infrastructure.db.uow import SqlAlchemyUoW
from score_publisher.infrastructure.scheduling.job_scheduler import JobScheduler


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_scheduler(request: Request) -> JobScheduler:
    return request.app.state.scheduler


SchedulerDep = Annotated[JobScheduler, Depends(get_scheduler)]
