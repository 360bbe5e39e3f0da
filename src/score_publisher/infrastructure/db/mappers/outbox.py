from __future__ import annotations

from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.domain.value_objects.enums import MessageStatus
from score_publisher.infrastructure.db.models.outbox import OutboxMessageModel


def model_to_entity(model: OutboxMessageModel) -> OutboxMessage:
    return OutboxMessage(
        id=model.id,
        event_id=model.event_id,
        event_type=model.event_type,
        payload=model.payload,
        status=MessageStatus(model.status),
        created_at=model.created_at,
        sent_at=model.sent_at,
        retry_count=model.retry_count,
        last_attempt_at=model.last_attempt_at,
    )


def entity_to_model(entity: OutboxMessage) -> OutboxMessageModel:
    model = OutboxMessageModel(
        event_id=entity.event_id,
        event_type=entity.event_type,
        payload=entity.payload,
        status=entity.status.value,
        created_at=entity.created_at,
        sent_at=entity.sent_at,
        retry_count=entity.retry_count,
        last_attempt_at=entity.last_attempt_at,
    )
    if entity.id is not None:
        model.id = entity.id
    return model
