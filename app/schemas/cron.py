"""Scheduler endpoint schemas (camelCase JSON for the cron provider)."""

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.workflow import TriggerRunSummary


class WorkflowTriggerRunResponse(BaseModel):
    """Summary of one scheduler invocation; duration in milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    triggers_processed: int = Field(alias="triggersProcessed")
    workflows_executed: int = Field(alias="workflowsExecuted")
    events_processed: int = Field(alias="eventsProcessed")
    errors: list[str]
    tenants: list[str]
    duration: int
    message: str | None = None
    error: str | None = None

    @classmethod
    def from_summary(cls, summary: TriggerRunSummary) -> "WorkflowTriggerRunResponse":
        return cls(
            success=summary.success,
            triggers_processed=summary.triggers_processed,
            workflows_executed=summary.workflows_executed,
            events_processed=summary.events_processed,
            errors=list(summary.errors),
            tenants=list(summary.tenants),
            duration=summary.duration_ms,
            message=summary.message,
            error=summary.error,
        )

    def to_body(self) -> dict:
        """JSON body; message and error only when set."""
        return self.model_dump(by_alias=True, exclude_none=True)


class UnauthorizedResponse(BaseModel):
    error: str = "Unauthorized"
