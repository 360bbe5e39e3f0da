from __future__ import annotations

from fastapi import APIRouter, status

from score_publisher.api.deps import SchedulerDep, UoWDep
from score_publisher.api.v1.schemas.event import (
    CreateEventRequest,
    EventResponse,
    JobStatusResponse,
    MessageResponse,
    UpdateEventStatusRequest,
)
from score_publisher.services import event_service

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: CreateEventRequest,
    uow: UoWDep,
    scheduler: SchedulerDep,
) -> EventResponse:
    event = await event_service.add_event(body.event_id, body.status, uow, scheduler)
    return EventResponse.model_validate(event, from_attributes=True)


@router.put("/{event_id}/status", response_model=MessageResponse)
async def update_event_status(
    event_id: str,
    body: UpdateEventStatusRequest,
    uow: UoWDep,
    scheduler: SchedulerDep,
) -> MessageResponse:
    await event_service.update_status(event_id, body.status, uow, scheduler)
    return MessageResponse(message="Event status updated successfully")


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, uow: UoWDep) -> EventResponse:
    event = await event_service.get_event(event_id, uow)
    return EventResponse.model_validate(event, from_attributes=True)


@router.get("/{event_id}/job", response_model=JobStatusResponse)
async def get_event_job(event_id: str, uow: UoWDep, scheduler: SchedulerDep) -> JobStatusResponse:
    event = await event_service.get_event(event_id, uow)
    return JobStatusResponse(
        event_id=event.event_id,
        running=scheduler.is_job_running(event.event_id),
    )
