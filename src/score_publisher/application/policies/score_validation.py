from __future__ import annotations

import logging
import re

from score_publisher.application.dto.score import ScoreReading

logger = logging.getLogger(__name__)

SCORE_PATTERN = re.compile(r"^\d+:\d+$")


def is_valid_event_id(event_id: str | None) -> bool:
    return event_id is not None and event_id.strip() != ""


def is_valid_score(score_text: str | None) -> bool:
    # fullmatch so a trailing newline does not sneak past ``$``
    return score_text is not None and SCORE_PATTERN.fullmatch(score_text) is not None


def is_valid_reading(event_id: str | None, score_text: str | None) -> bool:
    """Structural check of a score reading: non-blank event id, ``<int>:<int>`` score."""
    if not is_valid_event_id(event_id):
        logger.warning("Invalid event id: %r", event_id)
        return False
    if not is_valid_score(score_text):
        logger.warning("Invalid score format for event %s: %r", event_id, score_text)
        return False
    return True


def is_valid_score_reading(reading: ScoreReading | None) -> bool:
    if reading is None:
        return False
    return is_valid_reading(reading.event_id, reading.current_score)
