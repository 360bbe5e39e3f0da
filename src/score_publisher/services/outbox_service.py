"""Outbox engine: write-then-deliver for new readings, plus the retry sweep."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from score_publisher.application.dto.score import ScoreReading
from score_publisher.application.policies.score_validation import is_valid_reading
from score_publisher.application.ports.bus import ScorePublisher
from score_publisher.application.ports.clock import Clock, SystemClock
from score_publisher.application.repositories.outbox import Claim
from score_publisher.application.uow import UnitOfWork
from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.domain.exceptions import InvalidTransitionError
from score_publisher.domain.value_objects.enums import MessageEventType, MessageStatus

logger = logging.getLogger(__name__)

MAX_RETRIES = 5


@dataclass(slots=True)
class ReconcileReport:
    sent: int = 0
    failed: int = 0
    permanently_failed: int = 0
    skipped: int = 0

    @property
    def attempted(self) -> int:
        return self.sent + self.failed + self.permanently_failed

    def record(self, status: MessageStatus | None) -> None:
        if status == MessageStatus.SENT:
            self.sent += 1
        elif status == MessageStatus.FAILED:
            self.failed += 1
        elif status == MessageStatus.PERMANENTLY_FAILED:
            self.permanently_failed += 1
        else:
            self.skipped += 1


class OutboxService:
    """Owns every status change of outbox rows.

    No row is published without first holding its claim: new rows are
    inserted already claimed by the direct path, and the sweep claims each
    row with a status-guarded update before touching the bus.
    """

    def __init__(
        self,
        publisher: ScorePublisher,
        *,
        topic: str,
        max_retries: int = MAX_RETRIES,
        claim_ttl: float = 30.0,
        clock: Clock | None = None,
    ) -> None:
        self._publisher = publisher
        self._topic = topic
        self._max_retries = max_retries
        self._claim_ttl = timedelta(seconds=claim_ttl)
        self._clock = clock or SystemClock()

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def enqueue_and_deliver(
        self,
        event_id: str | None,
        current_score: str | None,
        uow: UnitOfWork,
    ) -> OutboxMessage | None:
        """Persist a PENDING row for the reading, then try to publish it once.

        Invalid input is logged and dropped without writing anything. Returns
        the row in its latest known state.
        """
        if not is_valid_reading(event_id, current_score):
            logger.error(
                "Rejected score reading event=%r score=%r, nothing written",
                event_id, current_score,
            )
            return None
        assert event_id is not None

        now = self._clock.now()
        reading = ScoreReading(event_id=event_id, current_score=current_score)
        claim = self._new_claim()
        message = await uow.outbox.add(
            OutboxMessage(
                id=None,
                event_id=event_id,
                event_type=MessageEventType.EVENT_SCORE_UPDATE.value,
                payload=reading.to_payload(),
                status=MessageStatus.PENDING,
                created_at=now,
            ),
            claim=claim,
        )
        await uow.commit()
        logger.info("Saved outbox message %s for event %s", message.id, event_id)

        updated = await self._deliver_claimed(message, claim, uow)
        return updated or message

    async def reconcile(self, uow: UnitOfWork) -> ReconcileReport:
        """Replay undelivered rows: PENDING oldest first, then retryable FAILED.

        Both queues are read before any delivery, so a row that fails in the
        PENDING pass waits for the next sweep.
        """
        report = ReconcileReport()
        pending = await uow.outbox.fetch_pending()
        retryable = await uow.outbox.fetch_retryable(self._max_retries)

        for batch in (pending, retryable):
            for message in batch:
                try:
                    report.record(await self._claim_and_deliver(message, uow))
                except Exception:
                    logger.exception("Error reconciling outbox message %s", message.id)
                    await uow.rollback()
                    report.skipped += 1

        if report.attempted or report.skipped:
            logger.info(
                "Outbox sweep: sent=%d failed=%d permanently_failed=%d skipped=%d",
                report.sent, report.failed, report.permanently_failed, report.skipped,
            )
        return report

    async def _claim_and_deliver(
        self, message: OutboxMessage, uow: UnitOfWork,
    ) -> MessageStatus | None:
        if message.is_terminal or message.retry_count >= self._max_retries:
            return None
        claim = self._new_claim()
        claimed = await uow.outbox.claim(message, claim, self._clock.now())
        await uow.commit()
        if not claimed:
            logger.debug("Outbox message %s is claimed elsewhere or changed, skipping", message.id)
            return None
        updated = await self._deliver_claimed(message, claim, uow)
        return updated.status if updated else None

    async def _deliver_claimed(
        self, message: OutboxMessage, claim: Claim, uow: UnitOfWork,
    ) -> OutboxMessage | None:
        assert message.id is not None
        try:
            ok = await self._publisher.publish(self._topic, message.event_id, message.payload)
        except Exception:
            logger.exception("Publisher raised for outbox message %s", message.id)
            ok = False

        now = self._clock.now()
        try:
            updated = (
                message.delivered(now)
                if ok
                else message.delivery_failed(now, self._max_retries)
            )
        except InvalidTransitionError:
            logger.exception("Outbox message %s cannot move on", message.id)
            await uow.outbox.release(message.id, claim.token)
            await uow.commit()
            return None

        if not await uow.outbox.transition(message, updated, claim.token):
            await uow.rollback()
            logger.warning(
                "Lost claim on outbox message %s, outcome %s not recorded",
                message.id, updated.status,
            )
            return None
        await uow.commit()

        if updated.status == MessageStatus.SENT:
            logger.info("Sent outbox message %s for event %s", message.id, message.event_id)
        elif updated.status == MessageStatus.FAILED:
            logger.warning(
                "Delivery failed for outbox message %s, retry count %d",
                message.id, updated.retry_count,
            )
        else:
            logger.error(
                "Outbox message %s permanently failed after %d attempts",
                message.id, updated.retry_count,
            )
        return updated

    def _new_claim(self) -> Claim:
        return Claim(
            token=str(uuid.uuid4()),
            expires_at=self._clock.now() + self._claim_ttl,
        )
