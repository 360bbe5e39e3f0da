from __future__ import annotations

from score_publisher.domain.entities.event import Event
from score_publisher.domain.value_objects.enums import EventStatus
from score_publisher.infrastructure.db.models.event import EventModel


def model_to_entity(model: EventModel) -> Event:
    return Event(
        event_id=model.event_id,
        status=EventStatus(model.status),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Event) -> EventModel:
    return EventModel(
        event_id=entity.event_id,
        status=entity.status.value,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
