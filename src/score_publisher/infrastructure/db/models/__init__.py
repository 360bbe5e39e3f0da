"""Import all models so Base.metadata sees every table."""
from score_publisher.infrastructure.db.models.event import EventModel
from score_publisher.infrastructure.db.models.outbox import OutboxMessageModel

__all__ = [
    "EventModel",
    "OutboxMessageModel",
]
