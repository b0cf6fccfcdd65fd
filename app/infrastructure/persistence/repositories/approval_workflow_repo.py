"""ApprovalWorkflow and ApprovalStage repositories. Return application DTOs."""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.approval import (
    ApprovalStageResult,
    ApprovalWorkflowCreate,
    ApprovalWorkflowResult,
    ApprovalWorkflowUpdate,
)
from app.domain.entities.approval import StageSpec
from app.domain.enums import ApproverType, OrganizationBody
from app.domain.exceptions import ConflictException
from app.infrastructure.persistence.models.approval import (
    ApprovalStage,
    ApprovalStageExecution,
    ApprovalWorkflow,
)
from app.infrastructure.persistence.repositories.base import BaseRepository


def _workflow_to_result(w: ApprovalWorkflow) -> ApprovalWorkflowResult:
    """Map ApprovalWorkflow ORM to ApprovalWorkflowResult (stages not loaded)."""
    return ApprovalWorkflowResult(
        id=w.id,
        code=w.code,
        name=w.name,
        description=w.description,
        module=w.module,
        entity_type=w.entity_type,
        is_active=w.is_active,
        requires_all_stages=w.requires_all_stages,
        created_at=w.created_at,
        created_by=w.created_by,
        updated_at=w.updated_at,
        updated_by=w.updated_by,
    )


def _stage_to_result(s: ApprovalStage) -> ApprovalStageResult:
    """Map ApprovalStage ORM to ApprovalStageResult."""
    return ApprovalStageResult(
        id=s.id,
        workflow_id=s.workflow_id,
        name=s.name,
        stage_order=s.stage_order,
        approver_type=ApproverType(s.approver_type),
        user_id=s.user_id,
        role_id=s.role_id,
        organization_body=(
            OrganizationBody(s.organization_body) if s.organization_body else None
        ),
        is_optional=s.is_optional,
        auto_approve=s.auto_approve,
    )


def _apply_spec(stage: ApprovalStage, spec: StageSpec) -> None:
    stage.name = spec.name
    stage.stage_order = spec.stage_order
    stage.approver_type = spec.approver_type.value
    stage.user_id = spec.user_id
    stage.role_id = spec.role_id
    stage.organization_body = spec.organization_body.value if spec.organization_body else None
    stage.is_optional = spec.is_optional
    stage.auto_approve = spec.auto_approve


class ApprovalWorkflowRepository(BaseRepository[ApprovalWorkflow]):
    """Workflow definition repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApprovalWorkflow)

    async def get_by_id(self, workflow_id: str) -> ApprovalWorkflowResult | None:
        row = await self.get_orm_by_id(workflow_id)
        return _workflow_to_result(row) if row else None

    async def get_by_code(self, code: str) -> ApprovalWorkflowResult | None:
        result = await self.db.execute(
            select(ApprovalWorkflow).where(ApprovalWorkflow.code == code)
        )
        row = result.scalar_one_or_none()
        return _workflow_to_result(row) if row else None

    async def list_workflows(
        self, *, active_only: bool = True, module: str | None = None
    ) -> list[ApprovalWorkflowResult]:
        q = select(ApprovalWorkflow)
        if active_only:
            q = q.where(ApprovalWorkflow.is_active.is_(True))
        if module is not None:
            q = q.where(ApprovalWorkflow.module == module)
        result = await self.db.execute(q.order_by(ApprovalWorkflow.code.asc()))
        return [_workflow_to_result(w) for w in result.scalars().all()]

    async def create_workflow(self, data: ApprovalWorkflowCreate) -> ApprovalWorkflowResult:
        """Create workflow row; return created DTO.

        Raises ConflictException when the code is taken (including by a
        concurrent creator that passed the service pre-check).
        """
        workflow = ApprovalWorkflow(
            code=data.code,
            name=data.name,
            description=data.description,
            module=data.module,
            entity_type=data.entity_type,
            is_active=data.is_active,
            requires_all_stages=data.requires_all_stages,
            created_by=data.created_by,
        )
        try:
            created = await self.create(workflow)
        except IntegrityError as e:
            raise ConflictException("approval_workflow", "code", data.code) from e
        return _workflow_to_result(created)

    async def update_workflow(
        self, workflow_id: str, data: ApprovalWorkflowUpdate
    ) -> ApprovalWorkflowResult | None:
        """Update non-None attributes; return updated DTO or None if not found."""
        workflow = await self.get_orm_by_id(workflow_id)
        if workflow is None:
            return None
        for attr in (
            "name",
            "description",
            "module",
            "entity_type",
            "is_active",
            "requires_all_stages",
        ):
            value = getattr(data, attr)
            if value is not None:
                setattr(workflow, attr, value)
        if data.updated_by is not None:
            workflow.updated_by = data.updated_by
        await self.db.flush()
        await self.db.refresh(workflow)
        return _workflow_to_result(workflow)


class ApprovalStageRepository(BaseRepository[ApprovalStage]):
    """Stage definition repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApprovalStage)

    async def list_by_workflow(self, workflow_id: str) -> list[ApprovalStageResult]:
        result = await self.db.execute(
            select(ApprovalStage)
            .where(ApprovalStage.workflow_id == workflow_id)
            .order_by(ApprovalStage.stage_order.asc())
        )
        return [_stage_to_result(s) for s in result.scalars().all()]

    async def create_stages(
        self, workflow_id: str, stages: list[StageSpec]
    ) -> list[ApprovalStageResult]:
        rows: list[ApprovalStage] = []
        for spec in stages:
            row = ApprovalStage(workflow_id=workflow_id)
            _apply_spec(row, spec)
            rows.append(row)
        created = await self.create_many(rows)
        return sorted((_stage_to_result(s) for s in created), key=lambda s: s.stage_order)

    async def update_stage(self, stage_id: str, stage: StageSpec) -> ApprovalStageResult | None:
        row = await self.get_orm_by_id(stage_id)
        if row is None:
            return None
        _apply_spec(row, stage)
        await self.db.flush()
        await self.db.refresh(row)
        return _stage_to_result(row)

    async def delete_stages(self, stage_ids: list[str]) -> None:
        if not stage_ids:
            return
        await self.db.execute(delete(ApprovalStage).where(ApprovalStage.id.in_(stage_ids)))
        await self.db.flush()

    async def count_executions(self, stage_id: str) -> int:
        result = await self.db.execute(
            select(func.count(ApprovalStageExecution.id)).where(
                ApprovalStageExecution.stage_id == stage_id
            )
        )
        return result.scalar() or 0
