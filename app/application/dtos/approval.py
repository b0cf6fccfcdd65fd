"""DTOs for approval workflows, requests and stage executions."""

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.entities.approval import StageSpec
from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    ApproverType,
    OrganizationBody,
    StageExecutionStatus,
)
from app.domain.value_objects.approval import (
    ApprovalContext,
    AssignedApprover,
    approver_from_column,
)


@dataclass(frozen=True)
class ApprovalStageResult:
    """Stage definition read-model."""

    id: str
    workflow_id: str
    name: str
    stage_order: int
    approver_type: ApproverType
    user_id: str | None
    role_id: str | None
    organization_body: OrganizationBody | None
    is_optional: bool
    auto_approve: bool


@dataclass(frozen=True)
class ApprovalWorkflowResult:
    """Workflow definition read-model; stages ordered by stage_order when loaded."""

    id: str
    code: str
    name: str
    description: str | None
    module: str
    entity_type: str
    is_active: bool
    requires_all_stages: bool
    created_at: datetime
    created_by: str | None
    updated_at: datetime | None
    updated_by: str | None
    stages: tuple[ApprovalStageResult, ...] = ()


@dataclass(frozen=True)
class ApprovalWorkflowCreate:
    """Write-model for a new workflow with its stages."""

    code: str
    name: str
    module: str
    entity_type: str
    stages: list[StageSpec]
    description: str | None = None
    is_active: bool = True
    requires_all_stages: bool = True
    created_by: str | None = None


@dataclass(frozen=True)
class ApprovalWorkflowUpdate:
    """Partial update; None leaves the attribute unchanged. stages replaces the stage set."""

    name: str | None = None
    description: str | None = None
    module: str | None = None
    entity_type: str | None = None
    is_active: bool | None = None
    requires_all_stages: bool | None = None
    stages: list[StageSpec] | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class ApprovalRequestResult:
    """Approval request read-model."""

    id: str
    workflow_id: str
    entity_type: str
    entity_id: str
    forum_id: str | None
    area_id: str | None
    unit_id: str | None
    requested_by: str
    requested_at: datetime
    current_stage_order: int
    status: ApprovalRequestStatus
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None

    @property
    def context(self) -> ApprovalContext:
        return ApprovalContext(
            forum_id=self.forum_id, area_id=self.area_id, unit_id=self.unit_id
        )


@dataclass(frozen=True)
class ApprovalRequestCreate:
    """Write-model for a new pending request."""

    workflow_id: str
    entity_type: str
    entity_id: str
    context: ApprovalContext
    requested_by: str
    requested_at: datetime


@dataclass(frozen=True)
class StageExecutionResult:
    """Stage execution read-model."""

    id: str
    request_id: str
    stage_id: str
    stage_order: int
    assigned_approver_id: str | None
    status: StageExecutionStatus
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    decision: ApprovalDecision | None = None
    comments: str | None = None
    stage_name: str | None = None

    @property
    def assigned_approver(self) -> AssignedApprover:
        return approver_from_column(self.assigned_approver_id)


@dataclass(frozen=True)
class StageExecutionCreate:
    """Write-model for one pending execution created at submission."""

    request_id: str
    stage_id: str
    stage_order: int
    assigned_approver_id: str | None


@dataclass(frozen=True)
class StageDecision:
    """Decision recorded on an execution."""

    status: StageExecutionStatus
    decision: ApprovalDecision
    reviewed_by: str
    reviewed_at: datetime
    comments: str | None = None


@dataclass(frozen=True)
class SubmissionResult:
    """Persisted request with all its stage executions."""

    request: ApprovalRequestResult
    executions: list[StageExecutionResult]


@dataclass(frozen=True)
class DecisionResult:
    """Updated execution and request after a decision."""

    execution: StageExecutionResult
    request: ApprovalRequestResult


@dataclass(frozen=True)
class ApprovalRequestDetails:
    """Request with executions (and workflow when loaded); request None when nothing is pending."""

    request: ApprovalRequestResult | None
    executions: list[StageExecutionResult] = field(default_factory=list)
    workflow: ApprovalWorkflowResult | None = None


@dataclass(frozen=True)
class PendingApprovalResult:
    """Pending execution assigned to a reviewer, with the request it belongs to."""

    execution_id: str
    request_id: str
    stage_id: str
    stage_name: str | None
    stage_order: int
    status: StageExecutionStatus
    assigned_approver_id: str | None
    workflow_code: str
    entity_type: str
    entity_id: str
    requested_at: datetime


@dataclass(frozen=True)
class PendingApprovalsCount:
    """Pending executions for a reviewer, grouped by workflow code."""

    pending_count: int
    by_workflow: dict[str, int]
