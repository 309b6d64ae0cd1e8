"""Trigger condition matching: does a workflow fire for a subject right now?

Pure functions, no I/O. Calendar comparisons use the tenant's reference
timezone (TenantConfig.timezone). Misconfigured workflows never match; that
is logged at DEBUG and is not an error.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

from app.application.services.condition_evaluator import evaluate_conditions
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.tenant import TenantConfig
from app.domain.entities.workflow import WorkflowEntity
from app.domain.enums import EventStatus
from app.shared.enums import TriggerEntityType, WorkflowTriggerType
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import local_today

logger = get_logger(__name__)


class MatchOutcome(str, Enum):
    """Why a workflow did or did not fire."""

    MATCHED = "matched"
    TRIGGER_MISMATCH = "trigger_mismatch"
    CONDITIONS_FAILED = "conditions_failed"


def valid_days_before(trigger_config: dict[str, Any] | None) -> int | None:
    """Return days_before when it is a non-negative int (bool excluded), else None."""
    value = (trigger_config or {}).get("days_before")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def candidate_target_date(days_before: int, now: datetime, tz: ZoneInfo) -> date:
    """Date an event must fall on to be `days_before` days away from today in tz."""
    return local_today(now, tz) + timedelta(days=days_before)


def _string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list) or not value:
        return None
    return [str(v) for v in value]


def _match_event_date_approaching(
    workflow: WorkflowEntity, subject: TriggerSubject, now: datetime, config: TenantConfig
) -> bool:
    days_before = valid_days_before(workflow.trigger_config)
    if days_before is None:
        logger.debug(
            "Skipping workflow %s: trigger_config.days_before must be an integer >= 0 (got %r)",
            workflow.id,
            (workflow.trigger_config or {}).get("days_before"),
        )
        return False
    if subject.entity_type != TriggerEntityType.EVENT:
        return False
    if (subject.status or "").strip().lower() == EventStatus.CANCELLED.value:
        return False
    earliest = subject.earliest_date
    if earliest is None:
        return False
    return earliest == candidate_target_date(days_before, now, config.zone)


def _match_task_status_changed(
    workflow: WorkflowEntity, subject: TriggerSubject, previous_status: str | None
) -> bool:
    if subject.entity_type != TriggerEntityType.TASK or subject.auto_created:
        return False
    if previous_status is None or previous_status == subject.status:
        return False
    trigger_config = workflow.trigger_config or {}
    from_status = trigger_config.get("from_status")
    to_status = trigger_config.get("to_status")
    if from_status and from_status != previous_status:
        return False
    if to_status and to_status != subject.status:
        return False
    return True


def _match_task_created(workflow: WorkflowEntity, subject: TriggerSubject) -> bool:
    if subject.entity_type != TriggerEntityType.TASK or subject.auto_created:
        return False
    trigger_config = workflow.trigger_config or {}
    task_types = _string_list(trigger_config.get("task_types"))
    if task_types is not None and subject.attributes.get("task_type") not in task_types:
        return False
    departments = _string_list(trigger_config.get("departments"))
    if departments is not None and subject.attributes.get("department") not in departments:
        return False
    return True


def _match_event_created(workflow: WorkflowEntity, subject: TriggerSubject) -> bool:
    if not workflow.event_type_ids:
        logger.debug("Skipping workflow %s: event_created needs event_type_ids", workflow.id)
        return False
    if subject.entity_type != TriggerEntityType.EVENT:
        return False
    if (subject.status or "").strip().lower() == EventStatus.CANCELLED.value:
        return False
    return subject.attributes.get("event_type_id") in workflow.event_type_ids


def condition_context(
    subject: TriggerSubject, previous_status: str | None = None
) -> dict[str, Any]:
    """Context for workflow conditions: {<entity_type>: attributes, "previous": {...}}."""
    context: dict[str, Any] = {subject.entity_type.value: dict(subject.attributes)}
    if previous_status is not None:
        context["previous"] = {"status": previous_status}
    return context


def evaluate(
    workflow: WorkflowEntity,
    subject: TriggerSubject,
    now: datetime,
    *,
    config: TenantConfig,
    previous_status: str | None = None,
) -> MatchOutcome:
    """Evaluate trigger then conditions for one (workflow, subject) pair."""
    if not workflow.is_active or not subject.belongs_to_tenant(workflow.tenant_id):
        return MatchOutcome.TRIGGER_MISMATCH
    match workflow.trigger_type:
        case WorkflowTriggerType.EVENT_DATE_APPROACHING.value:
            triggered = _match_event_date_approaching(workflow, subject, now, config)
        case WorkflowTriggerType.TASK_STATUS_CHANGED.value:
            triggered = _match_task_status_changed(workflow, subject, previous_status)
        case WorkflowTriggerType.TASK_CREATED.value:
            triggered = _match_task_created(workflow, subject)
        case WorkflowTriggerType.EVENT_CREATED.value:
            triggered = _match_event_created(workflow, subject)
        case _:
            logger.debug(
                "Skipping workflow %s: unsupported trigger type %r",
                workflow.id,
                workflow.trigger_type,
            )
            triggered = False
    if not triggered:
        return MatchOutcome.TRIGGER_MISMATCH
    if not evaluate_conditions(
        workflow.conditions, condition_context(subject, previous_status)
    ):
        return MatchOutcome.CONDITIONS_FAILED
    return MatchOutcome.MATCHED


def match(
    workflow: WorkflowEntity,
    subject: TriggerSubject,
    now: datetime,
    *,
    config: TenantConfig,
    previous_status: str | None = None,
) -> bool:
    """Return True iff the workflow fires for the subject at `now`."""
    return (
        evaluate(workflow, subject, now, config=config, previous_status=previous_status)
        == MatchOutcome.MATCHED
    )
