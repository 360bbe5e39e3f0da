"""Outbox worker: periodic reconciliation of undelivered score messages."""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from score_publisher.application.uow import UoWFactory
from score_publisher.config import settings
from score_publisher.infrastructure.bus.redis_streams import RedisStreamPublisher
from score_publisher.infrastructure.db.uow import uow_scope
from score_publisher.infrastructure.scheduling.ticker import Ticker
from score_publisher.services.outbox_service import OutboxService, ReconcileReport

logger = logging.getLogger(__name__)


def build_outbox_service(redis: aioredis.Redis) -> OutboxService:
    publisher = RedisStreamPublisher(
        redis,
        timeout=settings.PUBLISH_TIMEOUT,
        maxlen=settings.SCORE_STREAM_MAXLEN,
    )
    return OutboxService(
        publisher,
        topic=settings.SCORE_TOPIC,
        max_retries=settings.OUTBOX_MAX_RETRIES,
        claim_ttl=settings.OUTBOX_CLAIM_TTL,
    )


async def reconcile_once(outbox: OutboxService, uow_factory: UoWFactory) -> ReconcileReport:
    async with uow_factory() as uow:
        return await outbox.reconcile(uow)


def build_reconciler(
    outbox: OutboxService,
    uow_factory: UoWFactory = uow_scope,
    *,
    interval: float | None = None,
) -> Ticker:
    async def _sweep() -> None:
        await reconcile_once(outbox, uow_factory)

    return Ticker(
        _sweep,
        interval=interval or settings.RECONCILE_INTERVAL,
        delay=interval or settings.RECONCILE_INTERVAL,
        name="outbox-reconciler",
    )


async def run_outbox_worker() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    outbox = build_outbox_service(redis)
    reconciler = build_reconciler(outbox)

    logger.info(
        "Outbox worker started (interval=%.1fs, max_retries=%d, topic=%s)",
        settings.RECONCILE_INTERVAL,
        settings.OUTBOX_MAX_RETRIES,
        settings.SCORE_TOPIC,
    )
    reconciler.start()
    try:
        await asyncio.Event().wait()
    finally:
        reconciler.cancel()
        await reconciler.wait_inflight()
        await redis.aclose()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run_outbox_worker())
    except KeyboardInterrupt:
        logger.info("Outbox worker stopped")


if __name__ == "__main__":
    main()
