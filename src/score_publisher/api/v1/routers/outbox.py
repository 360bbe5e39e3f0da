from __future__ import annotations

from fastapi import APIRouter, Query

from score_publisher.api.deps import UoWDep
from score_publisher.api.v1.schemas.outbox import OutboxMessageResponse
from score_publisher.domain.value_objects.enums import MessageStatus

router = APIRouter(prefix="/api/v1/outbox", tags=["outbox"])


@router.get("", response_model=list[OutboxMessageResponse])
async def list_outbox_messages(
    uow: UoWDep,
    status: MessageStatus = Query(MessageStatus.FAILED),
    limit: int = Query(50, ge=1, le=500),
) -> list[OutboxMessageResponse]:
    """Most recent outbox rows in one status, newest first (read-only)."""
    messages = await uow.outbox.list_by_status(status, limit=limit)
    return [OutboxMessageResponse.model_validate(m, from_attributes=True) for m in messages]
