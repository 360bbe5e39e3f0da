from __future__ import annotations

import pytest

from score_publisher.application.dto.score import ScoreReading
from score_publisher.application.ports.provider import ScoreProviderError
from score_publisher.domain.value_objects.enums import MessageStatus
from score_publisher.services.score_poll_service import poll_event_score
from tests.conftest import FakeProvider, uow_factory_for


@pytest.mark.asyncio
async def test_valid_reading_is_enqueued_and_sent(outbox_service, uow, publisher):
    provider = FakeProvider({"E1": ScoreReading(event_id="E1", current_score="2:1")})

    message = await poll_event_score("E1", provider, outbox_service, uow_factory_for(uow))

    assert provider.calls == ["E1"]
    assert message.status == MessageStatus.SENT
    assert publisher.calls[0][2] == {"eventId": "E1", "currentScore": "2:1"}


@pytest.mark.asyncio
async def test_provider_failure_writes_nothing(outbox_service, uow, publisher):
    provider = FakeProvider({"E1": ScoreProviderError("503 from provider")})

    result = await poll_event_score("E1", provider, outbox_service, uow_factory_for(uow))

    assert result is None
    assert uow.outbox.rows == {}
    assert publisher.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reading",
    [
        ScoreReading(event_id="E1", current_score="1-0"),
        ScoreReading(event_id="E1", current_score=None),
        ScoreReading(event_id="", current_score="1:0"),
        ScoreReading(event_id=None, current_score="1:0"),
    ],
)
async def test_invalid_reading_writes_nothing(outbox_service, uow, publisher, reading):
    provider = FakeProvider({"E1": reading})

    result = await poll_event_score("E1", provider, outbox_service, uow_factory_for(uow))

    assert result is None
    assert uow.outbox.rows == {}
    assert publisher.calls == []


@pytest.mark.asyncio
async def test_failed_publish_leaves_row_for_reconciliation(outbox_service, uow, publisher):
    publisher.default = False
    provider = FakeProvider({"E1": ScoreReading(event_id="E1", current_score="0:0")})

    message = await poll_event_score("E1", provider, outbox_service, uow_factory_for(uow))

    assert message.status == MessageStatus.FAILED
    assert message.retry_count == 1
    assert await uow.outbox.fetch_retryable(5) == [message]
