from __future__ import annotations

from typing import Any, Protocol


class ScorePublisher(Protocol):
    async def publish(self, topic: str, key: str, payload: dict[str, Any]) -> bool:
        """Deliver one payload to the bus. True on acknowledged delivery."""
        ...
