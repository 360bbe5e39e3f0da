from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from score_publisher.domain.value_objects.enums import EventStatus


@dataclass(frozen=True, slots=True)
class Event:
    event_id: str
    status: EventStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_live(self) -> bool:
        return self.status == EventStatus.LIVE
