"""Pydantic request/response schemas for the API."""

from app.schemas.approval import (
    ApprovalDecisionRequest,
    ApprovalDecisionResponse,
    ApprovalRequestDetailsResponse,
    ApprovalRequestResponse,
    ApprovalStageRequest,
    ApprovalStageResponse,
    ApprovalSubmissionResponse,
    ApprovalSubmitRequest,
    ApprovalWorkflowCreateRequest,
    ApprovalWorkflowResponse,
    ApprovalWorkflowUpdateRequest,
    PendingApprovalResponse,
    PendingApprovalsCountResponse,
    StageExecutionResponse,
)
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

__all__ = [
    "ApprovalDecisionRequest",
    "ApprovalDecisionResponse",
    "ApprovalRequestDetailsResponse",
    "ApprovalRequestResponse",
    "ApprovalStageRequest",
    "ApprovalStageResponse",
    "ApprovalSubmissionResponse",
    "ApprovalSubmitRequest",
    "ApprovalWorkflowCreateRequest",
    "ApprovalWorkflowResponse",
    "ApprovalWorkflowUpdateRequest",
    "HealthResponse",
    "PendingApprovalResponse",
    "PendingApprovalsCountResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "StageExecutionResponse",
]
