"""Workflow administration use cases: create, update, fetch and list workflows."""

from __future__ import annotations

from dataclasses import replace

from app.application.dtos.approval import (
    ApprovalWorkflowCreate,
    ApprovalWorkflowResult,
    ApprovalWorkflowUpdate,
)
from app.application.interfaces.repositories import (
    IApprovalStageRepository,
    IApprovalWorkflowRepository,
)
from app.application.interfaces.services import IUnitOfWork
from app.domain.entities.approval import StageSpec, validate_stage_set
from app.domain.exceptions import (
    BadRequestException,
    ConflictException,
    ResourceNotFoundException,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ApprovalWorkflowService:
    """Manages workflow definitions and their ordered stages."""

    def __init__(
        self,
        uow: IUnitOfWork,
        workflow_repo: IApprovalWorkflowRepository,
        stage_repo: IApprovalStageRepository,
    ) -> None:
        self._uow = uow
        self._workflow_repo = workflow_repo
        self._stage_repo = stage_repo

    async def create_workflow(self, data: ApprovalWorkflowCreate) -> ApprovalWorkflowResult:
        """Create a workflow and its stages.

        Raises:
            ValidationException: No stages, duplicate stage order, or incomplete approver policy.
            ConflictException: Workflow code already exists.
        """
        stages = validate_stage_set(data.stages)
        async with self._uow.transaction():
            if await self._workflow_repo.get_by_code(data.code) is not None:
                raise ConflictException("approval_workflow", "code", data.code)
            workflow = await self._workflow_repo.create_workflow(data)
            created = await self._stage_repo.create_stages(workflow.id, stages)
        logger.info(
            "Created approval workflow %s (%s) with %d stages",
            workflow.code,
            workflow.id,
            len(created),
        )
        return replace(workflow, stages=tuple(created))

    async def update_workflow(
        self, workflow_id: str, data: ApprovalWorkflowUpdate
    ) -> ApprovalWorkflowResult:
        """Update workflow attributes and optionally replace its stage set.

        Stages are matched by stage_order: matching stages are updated in place,
        new orders are created, and missing orders are deleted. A stage that
        already has executions cannot be deleted.

        Raises:
            ResourceNotFoundException: Workflow not found.
            ValidationException: Invalid stage set.
            BadRequestException: A removed stage is referenced by executions.
        """
        new_stages = validate_stage_set(data.stages) if data.stages is not None else None
        async with self._uow.transaction():
            workflow = await self._workflow_repo.update_workflow(workflow_id, data)
            if workflow is None:
                raise ResourceNotFoundException("approval_workflow", workflow_id)
            if new_stages is not None:
                await self._replace_stages(workflow_id, new_stages)
            stages = await self._stage_repo.list_by_workflow(workflow_id)
        return replace(workflow, stages=tuple(stages))

    async def _replace_stages(self, workflow_id: str, new_stages: list[StageSpec]) -> None:
        existing = {s.stage_order: s for s in await self._stage_repo.list_by_workflow(workflow_id)}
        wanted = {s.stage_order: s for s in new_stages}

        removed = [stage for order, stage in existing.items() if order not in wanted]
        for stage in removed:
            if await self._stage_repo.count_executions(stage.id) > 0:
                raise BadRequestException(
                    f"Stage '{stage.name}' has approval executions and cannot be removed",
                    stage_id=stage.id,
                )
        if removed:
            await self._stage_repo.delete_stages([s.id for s in removed])

        for order, spec in wanted.items():
            if order in existing:
                await self._stage_repo.update_stage(existing[order].id, spec)
        to_create = [spec for order, spec in wanted.items() if order not in existing]
        if to_create:
            await self._stage_repo.create_stages(workflow_id, to_create)

    async def get_workflow_by_id(self, workflow_id: str) -> ApprovalWorkflowResult:
        workflow = await self._workflow_repo.get_by_id(workflow_id)
        if workflow is None:
            raise ResourceNotFoundException("approval_workflow", workflow_id)
        return await self._with_stages(workflow)

    async def get_workflow_by_code(self, code: str) -> ApprovalWorkflowResult:
        workflow = await self._workflow_repo.get_by_code(code)
        if workflow is None:
            raise ResourceNotFoundException("approval_workflow", code)
        return await self._with_stages(workflow)

    async def list_active_workflows(
        self, module: str | None = None
    ) -> list[ApprovalWorkflowResult]:
        """Return active workflows (with stages), optionally for one module."""
        workflows = await self._workflow_repo.list_workflows(active_only=True, module=module)
        return [await self._with_stages(w) for w in workflows]

    async def list_all_workflows(self) -> list[ApprovalWorkflowResult]:
        workflows = await self._workflow_repo.list_workflows(active_only=False)
        return [await self._with_stages(w) for w in workflows]

    async def _with_stages(self, workflow: ApprovalWorkflowResult) -> ApprovalWorkflowResult:
        stages = await self._stage_repo.list_by_workflow(workflow.id)
        return replace(workflow, stages=tuple(stages))
