from __future__ import annotations

from enum import StrEnum


class EventStatus(StrEnum):
    LIVE = "LIVE"
    NOT_LIVE = "NOT_LIVE"


class MessageStatus(StrEnum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    PERMANENTLY_FAILED = "PERMANENTLY_FAILED"


class MessageEventType(StrEnum):
    EVENT_SCORE_UPDATE = "EVENT_SCORE_UPDATE"
