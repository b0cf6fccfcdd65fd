"""Seed the default approval workflows (agent/member registration, wallet deposit,
death claim, cash handover). Existing codes are left untouched.

Usage:
    python -m scripts.seed_approval_workflows
Requires Postgres with migrations applied (alembic upgrade head).
"""

import asyncio
import sys

from app.application.services.default_workflows import seed_default_workflows
from app.application.use_cases.approvals import ApprovalWorkflowService
from app.core.config import get_settings
from app.domain.exceptions import SqlNotConfiguredException
from app.infrastructure.persistence.database import dispose_engine, get_session_factory
from app.infrastructure.persistence.repositories import (
    ApprovalStageRepository,
    ApprovalWorkflowRepository,
)
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from app.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Create missing default workflows."""
    get_settings()
    setup_logging()
    try:
        session_factory = get_session_factory()
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    try:
        async with session_factory() as session:
            service = ApprovalWorkflowService(
                uow=SqlAlchemyUnitOfWork(session),
                workflow_repo=ApprovalWorkflowRepository(session),
                stage_repo=ApprovalStageRepository(session),
            )
            created = await seed_default_workflows(service)
            for workflow in created:
                print(f"Created workflow {workflow.code} ({len(workflow.stages)} stages)")
            if not created:
                print("All default workflows already exist")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
