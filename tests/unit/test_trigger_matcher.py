"""Trigger matcher unit tests (pure functions, no I/O)."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from app.application.services.trigger_matcher import (
    MatchOutcome,
    candidate_target_date,
    condition_context,
    evaluate,
    match,
    valid_days_before,
)
from app.domain.entities.subject import TriggerSubject
from app.shared.enums import TriggerEntityType
from tests.factories import NOW, event_subject, task_result, tenant_config, workflow


def test_event_matches_when_start_date_is_days_before_away() -> None:
    """days_before=3 at 2025-03-10 matches an event on 2025-03-13."""
    wf = workflow(trigger_config={"days_before": 3})
    assert match(wf, event_subject(start=date(2025, 3, 13)), NOW, config=tenant_config())


def test_event_on_other_date_does_not_match() -> None:
    """Event one day off the target date is a trigger mismatch."""
    wf = workflow(trigger_config={"days_before": 3})
    outcome = evaluate(wf, event_subject(start=date(2025, 3, 14)), NOW, config=tenant_config())
    assert outcome == MatchOutcome.TRIGGER_MISMATCH


def test_days_before_zero_matches_event_today() -> None:
    """days_before=0 means the event day itself."""
    wf = workflow(trigger_config={"days_before": 0})
    assert match(wf, event_subject(start=date(2025, 3, 10)), NOW, config=tenant_config())


def test_tenant_timezone_decides_today() -> None:
    """12:00 UTC on 03-10 is already 03-11 in Auckland, so the target moves a day."""
    wf = workflow(trigger_config={"days_before": 3})
    auckland = tenant_config("Pacific/Auckland")
    assert not match(wf, event_subject(start=date(2025, 3, 13)), NOW, config=auckland)
    assert match(wf, event_subject(start=date(2025, 3, 14)), NOW, config=auckland)


def test_earliest_relevant_date_is_used() -> None:
    """With start_date and legacy event_date, the earlier one counts."""
    wf = workflow(trigger_config={"days_before": 3})
    subject = TriggerSubject(
        entity_type=TriggerEntityType.EVENT,
        id="ev1",
        tenant_id="t1",
        title="Annual gala",
        status="confirmed",
        relevant_dates=(date(2025, 3, 20), date(2025, 3, 13)),
    )
    assert match(wf, subject, NOW, config=tenant_config())


def test_undated_event_never_matches() -> None:
    """Events without any relevant date are skipped."""
    wf = workflow(trigger_config={"days_before": 3})
    assert not match(wf, event_subject(start=None), NOW, config=tenant_config())


@pytest.mark.parametrize("status", ["cancelled", " Cancelled "])
def test_cancelled_event_never_matches(status: str) -> None:
    """Cancelled events are excluded regardless of case and whitespace."""
    wf = workflow(trigger_config={"days_before": 3})
    subject = event_subject(start=date(2025, 3, 13), status=status)
    assert not match(wf, subject, NOW, config=tenant_config())


@pytest.mark.parametrize("config", [{}, {"days_before": -1}, {"days_before": "3"}, {"days_before": True}])
def test_invalid_days_before_never_matches(config: dict) -> None:
    """Missing, negative, string or bool days_before is a misconfiguration, not an error."""
    wf = workflow(trigger_config=config)
    assert not match(wf, event_subject(start=date(2025, 3, 13)), NOW, config=tenant_config())


def test_unknown_trigger_type_fails_closed() -> None:
    """Unsupported trigger types never match."""
    wf = workflow(trigger_type="deal_won", trigger_config={})
    outcome = evaluate(wf, event_subject(), NOW, config=tenant_config())
    assert outcome == MatchOutcome.TRIGGER_MISMATCH


def test_inactive_workflow_never_matches() -> None:
    """is_active=False short-circuits before the trigger check."""
    wf = workflow(is_active=False)
    assert not match(wf, event_subject(), NOW, config=tenant_config())


def test_subject_of_other_tenant_never_matches() -> None:
    """A subject from another tenant is not offered to the workflow."""
    wf = workflow()
    assert not match(wf, event_subject(tenant_id="t2"), NOW, config=tenant_config())


def test_task_status_changed_matches_transition() -> None:
    """from_status/to_status both satisfied."""
    wf = workflow(
        trigger_type="task_status_changed",
        trigger_config={"from_status": "pending", "to_status": "completed"},
    )
    subject = task_result(status="completed").to_subject()
    assert match(wf, subject, NOW, config=tenant_config(), previous_status="pending")


def test_task_status_changed_respects_from_status() -> None:
    """Transition from another status does not match."""
    wf = workflow(trigger_type="task_status_changed", trigger_config={"from_status": "pending"})
    subject = task_result(status="completed").to_subject()
    assert not match(wf, subject, NOW, config=tenant_config(), previous_status="in_progress")


def test_task_status_changed_requires_an_actual_change() -> None:
    """No previous status, or the same status, is not a change."""
    wf = workflow(trigger_type="task_status_changed")
    subject = task_result(status="pending").to_subject()
    assert not match(wf, subject, NOW, config=tenant_config(), previous_status=None)
    assert not match(wf, subject, NOW, config=tenant_config(), previous_status="pending")


def test_auto_created_tasks_never_fire_task_workflows() -> None:
    """Workflow-created tasks do not trigger task workflows (no cascades)."""
    subject = task_result(status="completed", auto_created=True).to_subject()
    changed = workflow(trigger_type="task_status_changed")
    created = workflow(trigger_type="task_created")
    assert not match(changed, subject, NOW, config=tenant_config(), previous_status="pending")
    assert not match(created, subject, NOW, config=tenant_config())


def test_task_created_filters_by_task_type_and_department() -> None:
    """task_types and departments lists restrict which tasks fire."""
    wf = workflow(
        trigger_type="task_created",
        trigger_config={"task_types": ["call"], "departments": ["sales"]},
    )
    config = tenant_config()
    assert match(wf, task_result(task_type="call", department="sales").to_subject(), NOW, config=config)
    assert not match(wf, task_result(task_type="email", department="sales").to_subject(), NOW, config=config)
    assert not match(wf, task_result(task_type="call", department="ops").to_subject(), NOW, config=config)


def test_task_created_event_subject_is_mismatch() -> None:
    """Task triggers ignore event subjects."""
    wf = workflow(trigger_type="task_created")
    assert not match(wf, event_subject(), NOW, config=tenant_config())


def test_event_created_matches_configured_event_types() -> None:
    """Only events whose type is listed fire; the event date is irrelevant."""
    wf = workflow(trigger_type="event_created", event_type_ids=("gala", "expo"))
    config = tenant_config()
    assert match(wf, event_subject(start=date(2025, 9, 1), event_type_id="expo"), NOW, config=config)
    assert not match(wf, event_subject(event_type_id="webinar"), NOW, config=config)
    assert not match(wf, event_subject(), NOW, config=config)


def test_event_created_without_event_types_never_matches() -> None:
    """An empty event type list is a misconfiguration, not a wildcard."""
    wf = workflow(trigger_type="event_created")
    assert not match(wf, event_subject(event_type_id="gala"), NOW, config=tenant_config())


def test_event_created_ignores_cancelled_events_and_tasks() -> None:
    wf = workflow(trigger_type="event_created", event_type_ids=("gala",))
    config = tenant_config()
    cancelled = event_subject(status="cancelled", event_type_id="gala")
    assert evaluate(wf, cancelled, NOW, config=config) == MatchOutcome.TRIGGER_MISMATCH
    assert not match(wf, task_result().to_subject(), NOW, config=config)


def test_conditions_failed_is_distinct_from_mismatch() -> None:
    """Trigger fires but a condition rejects the subject."""
    wf = workflow(
        trigger_config={"days_before": 3},
        conditions=[{"field": "event.status", "operator": "equals", "value": "confirmed"}],
    )
    outcome = evaluate(wf, event_subject(start=date(2025, 3, 13)), NOW, config=tenant_config())
    assert outcome == MatchOutcome.CONDITIONS_FAILED


def test_conditions_can_read_previous_status() -> None:
    """previous.status is available to task_status_changed conditions."""
    wf = workflow(
        trigger_type="task_status_changed",
        conditions=[{"field": "previous.status", "operator": "in", "value": ["pending"]}],
    )
    subject = task_result(status="completed").to_subject()
    assert match(wf, subject, NOW, config=tenant_config(), previous_status="pending")
    assert not match(wf, subject, NOW, config=tenant_config(), previous_status="in_progress")


def test_condition_context_shape() -> None:
    """Context is keyed by entity type with an optional previous block."""
    context = condition_context(task_result().to_subject(), "pending")
    assert context["task"]["title"] == "Call the venue"
    assert context["previous"] == {"status": "pending"}
    assert "previous" not in condition_context(event_subject())


def test_valid_days_before() -> None:
    """Only non-negative ints are accepted."""
    assert valid_days_before({"days_before": 7}) == 7
    assert valid_days_before({"days_before": 0}) == 0
    assert valid_days_before({"days_before": 1.5}) is None
    assert valid_days_before(None) is None


def test_candidate_target_date_uses_local_day() -> None:
    """Target date is computed from the local calendar day."""
    late_evening = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)
    assert candidate_target_date(1, late_evening, ZoneInfo("UTC")) == date(2025, 3, 11)
    assert candidate_target_date(1, late_evening, ZoneInfo("Europe/Berlin")) == date(2025, 3, 12)
