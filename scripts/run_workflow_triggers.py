"""Run time-based workflow triggers once (same pass as the cron endpoint).

Usage:
    python -m scripts.run_workflow_triggers [tenant_id_or_code]
If the tenant is omitted, processes all active tenants. Prints the JSON
summary; exits 1 on a fatal error or when any tenant reported errors.
Requires DATABASE_URL.
"""

import asyncio
import json
import sys

from app.application.use_cases.workflows import RunWorkflowTriggersUseCase
from app.core.config import get_settings
from app.core.lifespan import setup_telemetry, shutdown_resources
from app.domain.exceptions import SqlNotConfiguredException
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.services.workflow_trigger_store import SqlWorkflowTriggerStore
from app.schemas.cron import WorkflowTriggerRunResponse
from app.shared.telemetry.logging import setup_logging


async def main() -> int:
    """Run one scheduler pass and print its summary."""
    setup_logging()
    settings = get_settings()
    try:
        get_session_factory()
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        return 1
    setup_telemetry()
    only_tenant = sys.argv[1] if len(sys.argv) > 1 else None
    use_case = RunWorkflowTriggersUseCase(
        SqlWorkflowTriggerStore(
            get_session_factory,
            tenant_batch_size=settings.workflow_tenant_batch_size,
            retry_failed_runs=settings.workflow_retry_failed_runs,
        ),
        default_timezone=settings.workflow_default_timezone,
    )
    try:
        summary = await use_case.run(only_tenant=only_tenant)
    finally:
        await shutdown_resources()
    print(json.dumps(WorkflowTriggerRunResponse.from_summary(summary).to_body(), indent=2))
    return 0 if summary.success else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
