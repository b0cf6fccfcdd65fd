"""Application use cases: one entry point per workflow."""

from app.application.use_cases.approvals import (
    ApprovalRequestService,
    ApprovalWorkflowService,
)

__all__ = [
    "ApprovalRequestService",
    "ApprovalWorkflowService",
]
