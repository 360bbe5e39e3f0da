from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from score_publisher.infrastructure.bus.redis_streams import RedisStreamPublisher


class FakeRedis:
    def __init__(self, *, delay: float = 0.0, error: Exception | None = None, entry_id: str | None = "1-0") -> None:
        self.delay = delay
        self.error = error
        self.entry_id = entry_id
        self.entries: list[tuple[str, dict[str, Any], dict[str, Any]]] = []

    async def xadd(self, name: str, fields: dict[str, Any], **kwargs: Any) -> str | None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.entries.append((name, fields, kwargs))
        return self.entry_id


@pytest.mark.asyncio
async def test_publish_writes_key_and_json_value():
    redis = FakeRedis()
    publisher = RedisStreamPublisher(redis, timeout=1.0, maxlen=1000)

    ok = await publisher.publish("event-scores", "E1", {"eventId": "E1", "currentScore": "2:1"})

    assert ok is True
    [(stream, fields, kwargs)] = redis.entries
    assert stream == "event-scores"
    assert fields["key"] == "E1"
    assert json.loads(fields["value"]) == {"eventId": "E1", "currentScore": "2:1"}
    assert kwargs["maxlen"] == 1000


@pytest.mark.asyncio
async def test_publish_timeout_reports_failure():
    publisher = RedisStreamPublisher(FakeRedis(delay=0.2), timeout=0.01)

    assert await publisher.publish("event-scores", "E1", {"eventId": "E1"}) is False


@pytest.mark.asyncio
async def test_publish_broker_error_reports_failure():
    publisher = RedisStreamPublisher(FakeRedis(error=RedisConnectionError("refused")), timeout=1.0)

    assert await publisher.publish("event-scores", "E1", {"eventId": "E1"}) is False


@pytest.mark.asyncio
async def test_publish_without_entry_id_reports_failure():
    publisher = RedisStreamPublisher(FakeRedis(entry_id=None), timeout=1.0)

    assert await publisher.publish("event-scores", "E1", {"eventId": "E1"}) is False
