"""Redis Streams publisher for score updates."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from score_publisher.infrastructure.bus.serializer import serialize_payload

logger = logging.getLogger(__name__)


class RedisStreamPublisher:
    """Implements application.ports.bus.ScorePublisher.

    The topic is a stream name; each entry carries ``key`` (partition key)
    and ``value`` (JSON payload). One XADD per call, no internal retry.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        *,
        timeout: float = 5.0,
        maxlen: int | None = None,
    ) -> None:
        self._redis = redis
        self._timeout = timeout
        self._maxlen = maxlen

    async def publish(self, topic: str, key: str, payload: dict[str, Any]) -> bool:
        fields = {"key": key, "value": serialize_payload(payload)}
        try:
            entry_id = await asyncio.wait_for(
                self._redis.xadd(
                    topic,
                    fields,
                    maxlen=self._maxlen,
                    approximate=True,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Timed out after %.1fs publishing to %s (key=%s)",
                self._timeout, topic, key,
            )
            return False
        except (RedisError, OSError):
            logger.exception("Failed to publish to %s (key=%s)", topic, key)
            return False

        if not entry_id:
            logger.error("Broker returned no entry id for %s (key=%s)", topic, key)
            return False
        logger.debug("Published to %s key=%s id=%s", topic, key, entry_id)
        return True
