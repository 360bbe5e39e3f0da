"""HTTP client for the external score provider."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from score_publisher.application.dto.score import ScoreReading
from score_publisher.application.ports.provider import ScoreProviderError

logger = logging.getLogger(__name__)


class HttpScoreProvider:
    """``GET {base_url}/{event_id}/score`` -> ``{"eventId", "currentScore"}``."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def fetch_score(self, event_id: str) -> ScoreReading:
        url = f"{self._base_url}/{event_id}/score"
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise ScoreProviderError(f"timeout calling {url}") from exc
        except httpx.HTTPError as exc:
            raise ScoreProviderError(f"error calling {url}: {exc}") from exc

        if not response.is_success:
            raise ScoreProviderError(
                f"provider returned {response.status_code} for event {event_id}"
            )

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise ScoreProviderError(f"non-JSON body for event {event_id}") from exc
        if not isinstance(body, dict):
            raise ScoreProviderError(f"unexpected body for event {event_id}: {body!r}")

        event = body.get("eventId")
        score = body.get("currentScore")
        if (event is not None and not isinstance(event, str)) or (
            score is not None and not isinstance(score, str)
        ):
            raise ScoreProviderError(f"unexpected field types for event {event_id}: {body!r}")
        return ScoreReading(event_id=event, current_score=score)
