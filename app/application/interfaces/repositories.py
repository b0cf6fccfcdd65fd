"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.approval import (
        ApprovalRequestCreate,
        ApprovalRequestResult,
        ApprovalStageResult,
        ApprovalWorkflowCreate,
        ApprovalWorkflowResult,
        ApprovalWorkflowUpdate,
        PendingApprovalResult,
        StageDecision,
        StageExecutionCreate,
        StageExecutionResult,
    )
    from app.domain.entities.approval import StageSpec


# Approval workflow repository interface
class IApprovalWorkflowRepository(Protocol):
    """Protocol for workflow definitions (DIP)."""

    async def get_by_id(self, workflow_id: str) -> ApprovalWorkflowResult | None:
        """Return workflow by id (without stages), or None."""

    async def get_by_code(self, code: str) -> ApprovalWorkflowResult | None:
        """Return workflow by unique code (without stages), or None."""

    async def list_workflows(
        self, *, active_only: bool = True, module: str | None = None
    ) -> list[ApprovalWorkflowResult]:
        """Return workflows ordered by code, optionally only active and/or one module."""

    async def create_workflow(self, data: ApprovalWorkflowCreate) -> ApprovalWorkflowResult:
        """Create the workflow row (stages are created by the stage repository)."""

    async def update_workflow(
        self, workflow_id: str, data: ApprovalWorkflowUpdate
    ) -> ApprovalWorkflowResult | None:
        """Apply non-None attributes; return updated workflow or None if not found."""


# Approval stage repository interface
class IApprovalStageRepository(Protocol):
    """Protocol for stage definitions of a workflow."""

    async def list_by_workflow(self, workflow_id: str) -> list[ApprovalStageResult]:
        """Return stages of a workflow ordered by stage_order ascending."""

    async def create_stages(
        self, workflow_id: str, stages: list[StageSpec]
    ) -> list[ApprovalStageResult]:
        """Create stages for a workflow; return them ordered by stage_order."""

    async def update_stage(self, stage_id: str, stage: StageSpec) -> ApprovalStageResult | None:
        """Overwrite a stage's definition in place."""

    async def delete_stages(self, stage_ids: list[str]) -> None:
        """Delete stages by id."""

    async def count_executions(self, stage_id: str) -> int:
        """Return how many stage executions reference the stage."""


# Approval request repository interface
class IApprovalRequestRepository(Protocol):
    """Protocol for approval requests.

    Status transitions are conditional on the request still being Pending;
    they return None when another transaction already moved it.
    """

    async def get_by_id(self, request_id: str) -> ApprovalRequestResult | None:
        """Return request by id, or None."""

    async def get_for_update(self, request_id: str) -> ApprovalRequestResult | None:
        """Lock the request for the rest of the transaction and return it, or None."""

    async def find_pending_by_entity(
        self, entity_type: str, entity_id: str
    ) -> ApprovalRequestResult | None:
        """Return the most recent Pending request for the entity, or None."""

    async def create_request(self, data: ApprovalRequestCreate) -> ApprovalRequestResult:
        """Create a Pending request with current_stage_order = 1."""

    async def mark_approved(
        self, request_id: str, approved_by: str, approved_at: datetime
    ) -> ApprovalRequestResult | None:
        """Pending -> Approved."""

    async def mark_rejected(
        self,
        request_id: str,
        rejected_by: str,
        rejected_at: datetime,
        reason: str | None,
    ) -> ApprovalRequestResult | None:
        """Pending -> Rejected."""

    async def advance_stage(
        self, request_id: str, next_stage_order: int
    ) -> ApprovalRequestResult | None:
        """Move the current stage pointer; status stays Pending."""


# Stage execution repository interface
class IStageExecutionRepository(Protocol):
    """Protocol for stage executions of approval requests."""

    async def get_by_id(self, execution_id: str) -> StageExecutionResult | None:
        """Return execution by id, or None."""

    async def list_by_request(self, request_id: str) -> list[StageExecutionResult]:
        """Return executions of a request ordered by stage_order (fresh read)."""

    async def create_executions(
        self, executions: list[StageExecutionCreate]
    ) -> list[StageExecutionResult]:
        """Create Pending executions; return them ordered by stage_order."""

    async def record_decision(
        self, execution_id: str, decision: StageDecision
    ) -> StageExecutionResult | None:
        """Pending -> Approved/Rejected; None when the execution was no longer Pending."""

    async def list_pending_by_approver(self, approver_id: str) -> list[PendingApprovalResult]:
        """Return Pending executions assigned to the approver, oldest request first."""

    async def count_pending_by_workflow(self, approver_id: str) -> dict[str, int]:
        """Return {workflow_code: count} of Pending executions assigned to the approver."""
