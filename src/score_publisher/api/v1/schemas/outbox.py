from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from score_publisher.domain.value_objects.enums import MessageStatus


class OutboxMessageResponse(BaseModel):
    id: int
    event_id: str = Field(serialization_alias="eventId")
    event_type: str = Field(serialization_alias="eventType")
    payload: dict[str, Any]
    status: MessageStatus
    created_at: datetime = Field(serialization_alias="createdAt")
    sent_at: datetime | None = Field(serialization_alias="sentAt")
    retry_count: int = Field(serialization_alias="retryCount")
    last_attempt_at: datetime | None = Field(serialization_alias="lastAttemptAt")

    model_config = ConfigDict(from_attributes=True)
