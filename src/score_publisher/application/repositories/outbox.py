from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from score_publisher.domain.entities.outbox_message import OutboxMessage
from score_publisher.domain.value_objects.enums import MessageStatus


@dataclass(frozen=True, slots=True)
class Claim:
    """Exclusive, time-limited right to deliver one outbox row."""

    token: str
    expires_at: datetime


class OutboxStore(Protocol):
    async def add(
        self, message: OutboxMessage, *, claim: Claim | None = None,
    ) -> OutboxMessage:
        """Insert a new row, optionally already claimed by the caller."""
        ...

    async def fetch_pending(self) -> list[OutboxMessage]:
        """PENDING rows, oldest ``created_at`` first."""
        ...

    async def fetch_retryable(self, max_retries: int) -> list[OutboxMessage]:
        """FAILED rows below the retry cap, oldest ``last_attempt_at`` first."""
        ...

    async def list_by_status(
        self, status: MessageStatus, *, limit: int = 100,
    ) -> list[OutboxMessage]: ...

    async def claim(self, message: OutboxMessage, claim: Claim, now: datetime) -> bool:
        """Take the row if it still has the status and retry count of ``message``
        and nobody holds an unexpired claim on it."""
        ...

    async def transition(
        self, previous: OutboxMessage, updated: OutboxMessage, token: str,
    ) -> bool:
        """Persist ``updated`` and drop the claim, only while ``token`` still owns
        the row and its status is still ``previous.status``."""
        ...

    async def release(self, message_id: int, token: str) -> None: ...
