"""Approval workflow use cases: administration, submission and decisions."""

from app.application.use_cases.approvals.approval_requests import ApprovalRequestService
from app.application.use_cases.approvals.approval_workflows import ApprovalWorkflowService

__all__ = ["ApprovalRequestService", "ApprovalWorkflowService"]
