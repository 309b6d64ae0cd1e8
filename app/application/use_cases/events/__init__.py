"""Event use cases."""

from app.application.use_cases.events.event_operations import EventService, EventWriteResult

__all__ = ["EventService", "EventWriteResult"]
