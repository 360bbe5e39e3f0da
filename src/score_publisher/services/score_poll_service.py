"""Body of one scheduled poll for a live event."""
from __future__ import annotations

import logging

from score_publisher.application.policies.score_validation import is_valid_score_reading
from score_publisher.application.ports.provider import ScoreProvider, ScoreProviderError
from score_publisher.application.uow import UoWFactory
from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.services.outbox_service import OutboxService

logger = logging.getLogger(__name__)


async def poll_event_score(
    event_id: str,
    provider: ScoreProvider,
    outbox: OutboxService,
    uow_factory: UoWFactory,
) -> OutboxMessage | None:
    """Fetch, validate and enqueue one reading.

    Provider failures and invalid readings are logged and produce no
    outbox row; the next tick simply polls again.
    """
    try:
        reading = await provider.fetch_score(event_id)
    except ScoreProviderError as exc:
        logger.error("Error polling score for event %s: %s", event_id, exc)
        return None

    if not is_valid_score_reading(reading):
        logger.warning("Invalid score response for event %s: %r", event_id, reading)
        return None

    logger.info(
        "Score update for event %s: event id %s, current score %s",
        event_id, reading.event_id, reading.current_score,
    )
    async with uow_factory() as uow:
        return await outbox.enqueue_and_deliver(
            reading.event_id, reading.current_score, uow,
        )
