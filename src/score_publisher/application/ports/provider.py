from __future__ import annotations

from typing import Protocol

from score_publisher.application.dto.score import ScoreReading


class ScoreProviderError(Exception):
    """The provider could not produce a reading (transport, status or body)."""


class ScoreProvider(Protocol):
    async def fetch_score(self, event_id: str) -> ScoreReading: ...
