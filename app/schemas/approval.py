"""Approval API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.approval import (
    ApprovalWorkflowCreate,
    ApprovalWorkflowUpdate,
)
from app.domain.entities.approval import StageSpec
from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    ApproverType,
    OrganizationBody,
    StageExecutionStatus,
)
from app.domain.value_objects.approval import ApprovalContext


class ApprovalStageRequest(BaseModel):
    """Stage definition in a workflow create/update body."""

    name: str = Field(..., min_length=1, max_length=255)
    stage_order: int = Field(..., ge=1)
    approver_type: ApproverType
    user_id: str | None = None
    role_id: str | None = None
    organization_body: OrganizationBody | None = None
    is_optional: bool = False
    auto_approve: bool = False

    def to_spec(self) -> StageSpec:
        return StageSpec(**self.model_dump())


class ApprovalWorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow with its stages."""

    code: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    module: str = Field(..., min_length=1, max_length=100)
    entity_type: str = Field(..., min_length=1, max_length=100)
    stages: list[ApprovalStageRequest] = Field(..., min_length=1)
    description: str | None = None
    is_active: bool = True
    requires_all_stages: bool = True

    def to_create(self, created_by: str | None) -> ApprovalWorkflowCreate:
        return ApprovalWorkflowCreate(
            code=self.code,
            name=self.name,
            module=self.module,
            entity_type=self.entity_type,
            stages=[s.to_spec() for s in self.stages],
            description=self.description,
            is_active=self.is_active,
            requires_all_stages=self.requires_all_stages,
            created_by=created_by,
        )


class ApprovalWorkflowUpdateRequest(BaseModel):
    """Request body for updating a workflow (partial). stages replaces the stage set."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    module: str | None = Field(default=None, min_length=1, max_length=100)
    entity_type: str | None = Field(default=None, min_length=1, max_length=100)
    is_active: bool | None = None
    requires_all_stages: bool | None = None
    stages: list[ApprovalStageRequest] | None = Field(default=None, min_length=1)

    def to_update(self, updated_by: str | None) -> ApprovalWorkflowUpdate:
        return ApprovalWorkflowUpdate(
            name=self.name,
            description=self.description,
            module=self.module,
            entity_type=self.entity_type,
            is_active=self.is_active,
            requires_all_stages=self.requires_all_stages,
            stages=[s.to_spec() for s in self.stages] if self.stages is not None else None,
            updated_by=updated_by,
        )


class ApprovalStageResponse(BaseModel):
    """Stage definition response."""

    model_config = ConfigDict(from_attributes=True)

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


class ApprovalWorkflowResponse(BaseModel):
    """Workflow response with stages ordered by stage_order."""

    model_config = ConfigDict(from_attributes=True)

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
    stages: list[ApprovalStageResponse] = Field(default_factory=list)


class ApprovalSubmitRequest(BaseModel):
    """Request body for submitting an entity for approval."""

    workflow_code: str = Field(..., min_length=1, max_length=100)
    entity_type: str = Field(..., min_length=1, max_length=100)
    entity_id: str = Field(..., min_length=1)
    forum_id: str | None = None
    area_id: str | None = None
    unit_id: str | None = None

    def context(self) -> ApprovalContext:
        return ApprovalContext(
            forum_id=self.forum_id, area_id=self.area_id, unit_id=self.unit_id
        )


class ApprovalDecisionRequest(BaseModel):
    """Request body for approving or rejecting a stage execution."""

    decision: ApprovalDecision
    comments: str | None = Field(default=None, max_length=2000)


class StageExecutionResponse(BaseModel):
    """Stage execution response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    request_id: str
    stage_id: str
    stage_order: int
    stage_name: str | None = None
    assigned_approver_id: str | None
    status: StageExecutionStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    decision: ApprovalDecision | None
    comments: str | None


class ApprovalRequestResponse(BaseModel):
    """Approval request response."""

    model_config = ConfigDict(from_attributes=True)

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
    approved_by: str | None
    approved_at: datetime | None
    rejected_by: str | None
    rejected_at: datetime | None
    rejection_reason: str | None


class ApprovalSubmissionResponse(BaseModel):
    """Response for POST /requests: the request and its executions."""

    model_config = ConfigDict(from_attributes=True)

    request: ApprovalRequestResponse
    executions: list[StageExecutionResponse]


class ApprovalDecisionResponse(BaseModel):
    """Response for a decision: updated execution and request."""

    model_config = ConfigDict(from_attributes=True)

    execution: StageExecutionResponse
    request: ApprovalRequestResponse


class ApprovalRequestDetailsResponse(BaseModel):
    """Request with executions; request is null when the entity has nothing pending."""

    model_config = ConfigDict(from_attributes=True)

    request: ApprovalRequestResponse | None
    executions: list[StageExecutionResponse] = Field(default_factory=list)
    workflow: ApprovalWorkflowResponse | None = None


class PendingApprovalResponse(BaseModel):
    """Pending stage execution in a reviewer's queue."""

    model_config = ConfigDict(from_attributes=True)

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


class PendingApprovalsCountResponse(BaseModel):
    """Pending executions for the current user, total and per workflow code."""

    model_config = ConfigDict(from_attributes=True)

    pending_count: int
    by_workflow: dict[str, int] = Field(default_factory=dict)
