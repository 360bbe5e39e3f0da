from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from score_publisher.application.exceptions import ConflictError
from score_publisher.domain.entities.event import Event
from score_publisher.domain.value_objects.enums import EventStatus
from score_publisher.infrastructure.db.mappers import event as mapper
from score_publisher.infrastructure.db.models.event import EventModel


class EventReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, event_id: str) -> Event | None:
        result = await self._session.get(EventModel, event_id)
        return mapper.model_to_entity(result) if result else None

    async def list_by_status(self, status: EventStatus) -> list[Event]:
        stmt = (
            select(EventModel)
            .where(EventModel.status == status.value)
            .order_by(EventModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class EventWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, event: Event) -> Event:
        stmt = (
            pg_insert(EventModel)
            .values(
                event_id=event.event_id,
                status=event.status.value,
                created_at=event.created_at,
                updated_at=event.updated_at,
            )
            .on_conflict_do_nothing(index_elements=[EventModel.event_id])
            .returning(EventModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise ConflictError(f"Event {event.event_id} already exists")
        return mapper.model_to_entity(row)

    async def update_status(self, event_id: str, status: EventStatus) -> Event | None:
        stmt = (
            update(EventModel)
            .where(EventModel.event_id == event_id)
            .values(status=status.value)
            .returning(EventModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return mapper.model_to_entity(row) if row else None
