"""ApprovalRequest and ApprovalStageExecution repositories. Return application DTOs.

Status transitions use guarded updates (WHERE status = 'Pending') so a
concurrent transaction that already decided the row makes them return None.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.approval import (
    ApprovalRequestCreate,
    ApprovalRequestResult,
    PendingApprovalResult,
    StageDecision,
    StageExecutionCreate,
    StageExecutionResult,
)
from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    StageExecutionStatus,
)
from app.domain.exceptions import BadRequestException
from app.infrastructure.persistence.models.approval import (
    ApprovalRequest,
    ApprovalStage,
    ApprovalStageExecution,
    ApprovalWorkflow,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc

_PENDING_REQUEST = ApprovalRequestStatus.PENDING.value
_PENDING_EXECUTION = StageExecutionStatus.PENDING.value
PENDING_ENTITY_INDEX = "uq_approval_request_pending_entity"


def _violates(error: IntegrityError, constraint: str) -> bool:
    """True when the database rejected the statement on the named constraint."""
    cause = getattr(error.orig, "__cause__", None)
    if getattr(cause, "constraint_name", None) == constraint:
        return True
    return f'"{constraint}"' in str(error.orig)


def _request_to_result(r: ApprovalRequest) -> ApprovalRequestResult:
    """Map ApprovalRequest ORM to ApprovalRequestResult."""
    return ApprovalRequestResult(
        id=r.id,
        workflow_id=r.workflow_id,
        entity_type=r.entity_type,
        entity_id=r.entity_id,
        forum_id=r.forum_id,
        area_id=r.area_id,
        unit_id=r.unit_id,
        requested_by=r.requested_by,
        requested_at=ensure_utc(r.requested_at),
        current_stage_order=r.current_stage_order,
        status=ApprovalRequestStatus(r.status),
        approved_by=r.approved_by,
        approved_at=r.approved_at,
        rejected_by=r.rejected_by,
        rejected_at=r.rejected_at,
        rejection_reason=r.rejection_reason,
    )


def _execution_to_result(
    e: ApprovalStageExecution, stage_name: str | None = None
) -> StageExecutionResult:
    """Map ApprovalStageExecution ORM to StageExecutionResult."""
    return StageExecutionResult(
        id=e.id,
        request_id=e.request_id,
        stage_id=e.stage_id,
        stage_order=e.stage_order,
        assigned_approver_id=e.assigned_approver_id,
        status=StageExecutionStatus(e.status),
        reviewed_by=e.reviewed_by,
        reviewed_at=e.reviewed_at,
        decision=ApprovalDecision(e.decision) if e.decision else None,
        comments=e.comments,
        stage_name=stage_name,
    )


class ApprovalRequestRepository(BaseRepository[ApprovalRequest]):
    """Approval request repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApprovalRequest)

    async def get_by_id(self, request_id: str) -> ApprovalRequestResult | None:
        row = await self.get_orm_by_id(request_id, fresh=True)
        return _request_to_result(row) if row else None

    async def get_for_update(self, request_id: str) -> ApprovalRequestResult | None:
        """Lock the request row (SELECT ... FOR UPDATE) and return its current state.

        Decisions on one request serialize on this lock; statements issued after
        it is granted see sibling decisions committed in the meantime.
        """
        result = await self.db.execute(
            select(ApprovalRequest)
            .where(ApprovalRequest.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _request_to_result(row) if row else None

    async def find_pending_by_entity(
        self, entity_type: str, entity_id: str
    ) -> ApprovalRequestResult | None:
        result = await self.db.execute(
            select(ApprovalRequest)
            .where(
                ApprovalRequest.entity_type == entity_type,
                ApprovalRequest.entity_id == entity_id,
                ApprovalRequest.status == _PENDING_REQUEST,
            )
            .order_by(ApprovalRequest.requested_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _request_to_result(row) if row else None

    async def create_request(self, data: ApprovalRequestCreate) -> ApprovalRequestResult:
        """Insert a Pending request.

        Raises BadRequestException when the partial unique index rejects a
        second pending request for the entity (concurrent submission).
        Other integrity errors (unknown workflow, bad status) propagate.
        """
        request = ApprovalRequest(
            workflow_id=data.workflow_id,
            entity_type=data.entity_type,
            entity_id=data.entity_id,
            forum_id=data.context.forum_id,
            area_id=data.context.area_id,
            unit_id=data.context.unit_id,
            requested_by=data.requested_by,
            requested_at=data.requested_at,
            current_stage_order=1,
            status=_PENDING_REQUEST,
        )
        try:
            created = await self.create(request)
        except IntegrityError as e:
            if not _violates(e, PENDING_ENTITY_INDEX):
                raise
            raise BadRequestException(
                f"An approval request for this {data.entity_type} is already pending",
                entity_type=data.entity_type,
                entity_id=data.entity_id,
            ) from e
        return _request_to_result(created)

    async def mark_approved(
        self, request_id: str, approved_by: str, approved_at: datetime
    ) -> ApprovalRequestResult | None:
        row = await self.update_where(
            request_id,
            [ApprovalRequest.status == _PENDING_REQUEST],
            {
                "status": ApprovalRequestStatus.APPROVED.value,
                "approved_by": approved_by,
                "approved_at": approved_at,
            },
        )
        return _request_to_result(row) if row else None

    async def mark_rejected(
        self,
        request_id: str,
        rejected_by: str,
        rejected_at: datetime,
        reason: str | None,
    ) -> ApprovalRequestResult | None:
        row = await self.update_where(
            request_id,
            [ApprovalRequest.status == _PENDING_REQUEST],
            {
                "status": ApprovalRequestStatus.REJECTED.value,
                "rejected_by": rejected_by,
                "rejected_at": rejected_at,
                "rejection_reason": reason,
            },
        )
        return _request_to_result(row) if row else None

    async def advance_stage(
        self, request_id: str, next_stage_order: int
    ) -> ApprovalRequestResult | None:
        row = await self.update_where(
            request_id,
            [ApprovalRequest.status == _PENDING_REQUEST],
            {"current_stage_order": next_stage_order},
        )
        return _request_to_result(row) if row else None


class ApprovalStageExecutionRepository(BaseRepository[ApprovalStageExecution]):
    """Stage execution repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApprovalStageExecution)

    async def get_by_id(self, execution_id: str) -> StageExecutionResult | None:
        row = await self.get_orm_by_id(execution_id, fresh=True)
        return _execution_to_result(row) if row else None

    async def list_by_request(self, request_id: str) -> list[StageExecutionResult]:
        """Return executions with stage names, re-read from the database."""
        result = await self.db.execute(
            select(ApprovalStageExecution, ApprovalStage.name)
            .join(ApprovalStage, ApprovalStage.id == ApprovalStageExecution.stage_id)
            .where(ApprovalStageExecution.request_id == request_id)
            .order_by(ApprovalStageExecution.stage_order.asc())
            .execution_options(populate_existing=True)
        )
        return [_execution_to_result(e, name) for e, name in result.all()]

    async def create_executions(
        self, executions: list[StageExecutionCreate]
    ) -> list[StageExecutionResult]:
        rows = [
            ApprovalStageExecution(
                request_id=e.request_id,
                stage_id=e.stage_id,
                stage_order=e.stage_order,
                assigned_approver_id=e.assigned_approver_id,
                status=_PENDING_EXECUTION,
            )
            for e in executions
        ]
        created = await self.create_many(rows)
        return sorted(
            (_execution_to_result(e) for e in created), key=lambda e: e.stage_order
        )

    async def record_decision(
        self, execution_id: str, decision: StageDecision
    ) -> StageExecutionResult | None:
        row = await self.update_where(
            execution_id,
            [ApprovalStageExecution.status == _PENDING_EXECUTION],
            {
                "status": decision.status.value,
                "decision": decision.decision.value,
                "reviewed_by": decision.reviewed_by,
                "reviewed_at": decision.reviewed_at,
                "comments": decision.comments,
            },
        )
        return _execution_to_result(row) if row else None

    async def list_pending_by_approver(self, approver_id: str) -> list[PendingApprovalResult]:
        result = await self.db.execute(
            select(
                ApprovalStageExecution,
                ApprovalStage.name,
                ApprovalWorkflow.code,
                ApprovalRequest.entity_type,
                ApprovalRequest.entity_id,
                ApprovalRequest.requested_at,
            )
            .join(ApprovalStage, ApprovalStage.id == ApprovalStageExecution.stage_id)
            .join(ApprovalRequest, ApprovalRequest.id == ApprovalStageExecution.request_id)
            .join(ApprovalWorkflow, ApprovalWorkflow.id == ApprovalRequest.workflow_id)
            .where(
                ApprovalStageExecution.assigned_approver_id == approver_id,
                ApprovalStageExecution.status == _PENDING_EXECUTION,
            )
            .order_by(
                ApprovalRequest.requested_at.asc(),
                ApprovalStageExecution.stage_order.asc(),
            )
        )
        return [
            PendingApprovalResult(
                execution_id=e.id,
                request_id=e.request_id,
                stage_id=e.stage_id,
                stage_name=stage_name,
                stage_order=e.stage_order,
                status=StageExecutionStatus(e.status),
                assigned_approver_id=e.assigned_approver_id,
                workflow_code=workflow_code,
                entity_type=entity_type,
                entity_id=entity_id,
                requested_at=ensure_utc(requested_at),
            )
            for e, stage_name, workflow_code, entity_type, entity_id, requested_at in result.all()
        ]

    async def count_pending_by_workflow(self, approver_id: str) -> dict[str, int]:
        result = await self.db.execute(
            select(ApprovalWorkflow.code, func.count(ApprovalStageExecution.id))
            .join(ApprovalRequest, ApprovalRequest.id == ApprovalStageExecution.request_id)
            .join(ApprovalWorkflow, ApprovalWorkflow.id == ApprovalRequest.workflow_id)
            .where(
                ApprovalStageExecution.assigned_approver_id == approver_id,
                ApprovalStageExecution.status == _PENDING_EXECUTION,
            )
            .group_by(ApprovalWorkflow.code)
        )
        return {code: count for code, count in result.all()}
