from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ScoreReading:
    """One score sample as returned by the provider."""

    event_id: str | None
    current_score: str | None

    def to_payload(self) -> dict[str, Any]:
        return {"eventId": self.event_id, "currentScore": self.current_score}
