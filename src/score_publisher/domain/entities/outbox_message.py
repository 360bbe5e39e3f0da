"""Outbox message entity and its delivery state machine.

Allowed transitions::

    PENDING -> SENT | FAILED
    FAILED  -> SENT | FAILED | PERMANENTLY_FAILED

SENT and PERMANENTLY_FAILED are terminal. ``retry_count`` only grows and
never exceeds ``max_retries``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from score_publisher.domain.exceptions import InvalidTransitionError
from score_publisher.domain.value_objects.enums import MessageStatus

ALLOWED_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.PENDING: frozenset({MessageStatus.SENT, MessageStatus.FAILED}),
    MessageStatus.FAILED: frozenset(
        {MessageStatus.SENT, MessageStatus.FAILED, MessageStatus.PERMANENTLY_FAILED}
    ),
    MessageStatus.SENT: frozenset(),
    MessageStatus.PERMANENTLY_FAILED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class OutboxMessage:
    id: int | None
    event_id: str
    event_type: str
    payload: dict[str, Any]
    status: MessageStatus
    created_at: datetime
    sent_at: datetime | None = None
    retry_count: int = 0
    last_attempt_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def _check(self, target: MessageStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"outbox message {self.id}: {self.status} -> {target} is not allowed"
            )

    def delivered(self, now: datetime) -> OutboxMessage:
        self._check(MessageStatus.SENT)
        return replace(self, status=MessageStatus.SENT, sent_at=now)

    def delivery_failed(self, now: datetime, max_retries: int) -> OutboxMessage:
        """Record one failed attempt.

        The attempt that brings ``retry_count`` up to ``max_retries`` makes
        the message permanently failed.
        """
        retry_count = min(self.retry_count + 1, max_retries)
        target = (
            MessageStatus.FAILED
            if retry_count < max_retries
            else MessageStatus.PERMANENTLY_FAILED
        )
        self._check(target)
        return replace(
            self,
            status=target,
            retry_count=retry_count,
            last_attempt_at=now,
        )
