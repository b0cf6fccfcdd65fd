"""Application DTOs (no ORM dependency)."""

from app.application.dtos.approval import (
    ApprovalRequestCreate,
    ApprovalRequestDetails,
    ApprovalRequestResult,
    ApprovalStageResult,
    ApprovalWorkflowCreate,
    ApprovalWorkflowResult,
    ApprovalWorkflowUpdate,
    DecisionResult,
    PendingApprovalResult,
    PendingApprovalsCount,
    StageDecision,
    StageExecutionCreate,
    StageExecutionResult,
    SubmissionResult,
)

__all__ = [
    "ApprovalRequestCreate",
    "ApprovalRequestDetails",
    "ApprovalRequestResult",
    "ApprovalStageResult",
    "ApprovalWorkflowCreate",
    "ApprovalWorkflowResult",
    "ApprovalWorkflowUpdate",
    "DecisionResult",
    "PendingApprovalResult",
    "PendingApprovalsCount",
    "StageDecision",
    "StageExecutionCreate",
    "StageExecutionResult",
    "SubmissionResult",
]
