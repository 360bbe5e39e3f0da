from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from score_publisher.domain.value_objects.enums import EventStatus


class CreateEventRequest(BaseModel):
    event_id: str = Field(alias="eventId", min_length=1, max_length=100)
    status: EventStatus

    model_config = ConfigDict(populate_by_name=True)


class UpdateEventStatusRequest(BaseModel):
    status: EventStatus


class EventResponse(BaseModel):
    event_id: str = Field(serialization_alias="eventId")
    status: EventStatus

    model_config = ConfigDict(from_attributes=True)


class JobStatusResponse(BaseModel):
    event_id: str = Field(serialization_alias="eventId")
    running: bool


class MessageResponse(BaseModel):
    message: str
