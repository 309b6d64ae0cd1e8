"""Run time-based workflow triggers (event_date_approaching) for every active tenant."""

from __future__ import annotations

import time
from datetime import datetime
from typing import TYPE_CHECKING

from app.application.dtos.workflow import TenantTriggerResult, TriggerRunSummary
from app.application.services.trigger_matcher import (
    candidate_target_date,
    valid_days_before,
)
from app.shared.enums import WorkflowTriggerType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation, add_span_attributes, traced
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.dtos.tenant import TenantResult
    from app.application.interfaces.services import (
        ITriggerUnitOfWork,
        IWorkflowTriggerStore,
    )
    from app.domain.entities.tenant import TenantConfig
    from app.domain.entities.workflow import WorkflowEntity

logger = get_logger(__name__)

NO_ACTIVE_TENANTS_MESSAGE = "No active tenants to process"


class RunWorkflowTriggersUseCase:
    """Scheduler pass: for each tenant, offer candidate events to date workflows.

    Tenants are processed sequentially, each in its own unit of work; a failing
    tenant is reported in the summary errors and the next tenant still runs.
    Every (event, workflow) pair is committed on its own, so a failure of one
    pair leaves earlier pairs in place. Re-running on the same day is safe: the
    dedup window turns repeated pairs into already-run results.
    """

    def __init__(
        self, store: IWorkflowTriggerStore, *, default_timezone: str = "UTC"
    ) -> None:
        self._store = store
        self._default_timezone = default_timezone

    @traced("workflow_triggers.run")
    async def run(
        self, now: datetime | None = None, *, only_tenant: str | None = None
    ) -> TriggerRunSummary:
        """Process all active tenants, or only the one whose id or code is only_tenant.

        Never raises; a fatal error sets summary.fatal.
        """
        started = time.perf_counter()
        now = now or utc_now()
        summary = TriggerRunSummary()
        try:
            tenants = await self._store.list_active_tenants()
            if only_tenant is not None:
                tenants = [t for t in tenants if only_tenant in (t.id, t.code)]
            if not tenants:
                logger.info("Workflow triggers: no active tenants")
                summary.message = NO_ACTIVE_TENANTS_MESSAGE
            for tenant in tenants:
                summary.tenants.append(tenant.id)
                try:
                    result = await self._run_tenant(tenant, now)
                except Exception as e:
                    logger.exception(
                        "Workflow triggers failed for tenant %s (%s)", tenant.name, tenant.id
                    )
                    summary.errors.append(f"[{tenant.name}] {e}")
                    continue
                summary.triggers_processed += result.triggers_processed
                summary.workflows_executed += result.workflows_executed
                summary.events_processed += result.events_processed
                summary.errors.extend(f"[{tenant.name}] {err}" for err in result.errors)
        except Exception as e:
            logger.exception("Workflow triggers: fatal error")
            summary.fatal = True
            summary.error = str(e) or e.__class__.__name__
        summary.duration_ms = int((time.perf_counter() - started) * 1000)
        add_span_attributes(
            tenants=len(summary.tenants),
            workflows_executed=summary.workflows_executed,
            errors=len(summary.errors),
        )
        logger.info(
            "Workflow triggers done: tenants=%d triggers=%d executed=%d events=%d errors=%d duration_ms=%d",
            len(summary.tenants),
            summary.triggers_processed,
            summary.workflows_executed,
            summary.events_processed,
            len(summary.errors),
            summary.duration_ms,
        )
        return summary

    async def _run_tenant(self, tenant: TenantResult, now: datetime) -> TenantTriggerResult:
        config = tenant.to_config(self._default_timezone)
        async with TracedOperation(
            "workflow_triggers.tenant", {"tenant_id": tenant.id}
        ), self._store.tenant_scope(tenant.id) as uow:
            return await self._process_event_date_approaching(uow, config, now)

    async def _process_event_date_approaching(
        self, uow: ITriggerUnitOfWork, config: TenantConfig, now: datetime
    ) -> TenantTriggerResult:
        result = TenantTriggerResult()
        try:
            workflows = await uow.workflows.get_active_by_trigger(
                config.tenant_id, WorkflowTriggerType.EVENT_DATE_APPROACHING.value
            )
        except Exception as e:
            result.errors.append(f"Failed to fetch workflows: {e}")
            return result
        if not workflows:
            logger.debug("No event_date_approaching workflows for tenant %s", config.tenant_id)
            return result

        by_offset: dict[int, list[WorkflowEntity]] = {}
        for workflow in workflows:
            days_before = valid_days_before(workflow.trigger_config)
            if days_before is None:
                logger.debug(
                    "Skipping workflow %s: invalid days_before %r",
                    workflow.id,
                    workflow.trigger_config.get("days_before"),
                )
                continue
            by_offset.setdefault(days_before, []).append(workflow)

        for days_before, offset_workflows in sorted(by_offset.items()):
            target = candidate_target_date(days_before, now, config.zone)
            try:
                events = await uow.events.list_by_target_date(config.tenant_id, target)
            except Exception as e:
                await uow.rollback()
                result.errors.append(f"Failed to fetch events: {e}")
                continue
            if not events:
                continue
            logger.debug(
                "Tenant %s: %d event(s) on %s (days_before=%d)",
                config.tenant_id,
                len(events),
                target.isoformat(),
                days_before,
            )
            result.events_processed += len(events)

            for event in events:
                for workflow in offset_workflows:
                    result.triggers_processed += 1
                    try:
                        runs = await uow.runner.run_for_subject(
                            [workflow],
                            event,
                            tenant_config=config,
                            now=now,
                            days_before=days_before,
                        )
                        await uow.commit()
                    except Exception as e:
                        logger.warning(
                            "Workflow %s failed for event %s (tenant_id=%s): %s",
                            workflow.id,
                            event.id,
                            config.tenant_id,
                            e,
                        )
                        await uow.rollback()
                        result.errors.append(
                            f"Failed to execute workflow {workflow.id} for event {event.id}: {e}"
                        )
                        continue
                    result.workflows_executed += sum(1 for r in runs if r.executed)
        return result
