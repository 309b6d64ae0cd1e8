"""CRM event API schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.event import EventCreate
from app.schemas.workflow import WorkflowRunResponse


class EventCreateRequest(BaseModel):
    """Request body for creating a CRM event."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    status: str | None = Field(default=None, max_length=32)
    start_date: date | None = None
    end_date: date | None = None
    event_date: date | None = None
    account_id: str | None = Field(default=None, max_length=64)
    event_type_id: str | None = Field(default=None, max_length=64)

    def to_dto(self) -> EventCreate:
        return EventCreate(**self.model_dump())


class EventResponse(BaseModel):
    """CRM event response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    title: str
    description: str | None
    status: str
    start_date: date | None
    end_date: date | None
    event_date: date | None
    account_id: str | None
    event_type_id: str | None
    created_at: datetime | None
    updated_at: datetime | None


class EventWriteResponse(BaseModel):
    """Event after a write plus the workflows it fired."""

    event: EventResponse
    workflow_runs: list[WorkflowRunResponse]
