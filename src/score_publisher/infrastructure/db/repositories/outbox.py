from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from score_publisher.application.repositories.outbox import Claim
from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.domain.value_objects.enums import MessageStatus
from score_publisher.infrastructure.db.mappers import outbox as mapper
from score_publisher.infrastructure.db.models.outbox import OutboxMessageModel


class OutboxRepo:
    """Status-guarded access to ``outbox_messages``.

    Every mutation is a single conditional UPDATE; callers learn from the
    returned flag whether their expected pre-state still held.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        message: OutboxMessage,
        *,
        claim: Claim | None = None,
    ) -> OutboxMessage:
        model = mapper.entity_to_model(message)
        if claim is not None:
            model.claim_token = claim.token
            model.claimed_until = claim.expires_at
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def fetch_pending(self) -> list[OutboxMessage]:
        stmt = (
            select(OutboxMessageModel)
            .where(OutboxMessageModel.status == MessageStatus.PENDING.value)
            .order_by(OutboxMessageModel.created_at.asc(), OutboxMessageModel.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def fetch_retryable(self, max_retries: int) -> list[OutboxMessage]:
        stmt = (
            select(OutboxMessageModel)
            .where(
                OutboxMessageModel.status == MessageStatus.FAILED.value,
                OutboxMessageModel.retry_count < max_retries,
            )
            .order_by(
                OutboxMessageModel.last_attempt_at.asc().nullsfirst(),
                OutboxMessageModel.id.asc(),
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_by_status(
        self,
        status: MessageStatus,
        *,
        limit: int = 100,
    ) -> list[OutboxMessage]:
        stmt = (
            select(OutboxMessageModel)
            .where(OutboxMessageModel.status == status.value)
            .order_by(OutboxMessageModel.created_at.desc(), OutboxMessageModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def claim(self, message: OutboxMessage, claim: Claim, now: datetime) -> bool:
        stmt = (
            update(OutboxMessageModel)
            .where(
                OutboxMessageModel.id == message.id,
                OutboxMessageModel.status == message.status.value,
                OutboxMessageModel.retry_count == message.retry_count,
                or_(
                    OutboxMessageModel.claimed_until.is_(None),
                    OutboxMessageModel.claimed_until < now,
                ),
            )
            .values(claim_token=claim.token, claimed_until=claim.expires_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def transition(
        self,
        previous: OutboxMessage,
        updated: OutboxMessage,
        token: str,
    ) -> bool:
        stmt = (
            update(OutboxMessageModel)
            .where(
                OutboxMessageModel.id == previous.id,
                OutboxMessageModel.status == previous.status.value,
                OutboxMessageModel.claim_token == token,
            )
            .values(
                status=updated.status.value,
                sent_at=updated.sent_at,
                retry_count=updated.retry_count,
                last_attempt_at=updated.last_attempt_at,
                claim_token=None,
                claimed_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def release(self, message_id: int, token: str) -> None:
        stmt = (
            update(OutboxMessageModel)
            .where(
                OutboxMessageModel.id == message_id,
                OutboxMessageModel.claim_token == token,
            )
            .values(claim_token=None, claimed_until=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
