from __future__ import annotations

from typing import Protocol

from score_publisher.domain.entities.event import Event
from score_publisher.domain.value_objects.enums import EventStatus


class EventReader(Protocol):
    async def get_by_id(self, event_id: str) -> Event | None: ...

    async def list_by_status(self, status: EventStatus) -> list[Event]: ...


class EventWriter(Protocol):
    async def create(self, event: Event) -> Event:
        """Insert the event. Raises ConflictError if the id already exists."""
        ...

    async def update_status(self, event_id: str, status: EventStatus) -> Event | None:
        """Return the updated event, or None when no such event exists."""
        ...
