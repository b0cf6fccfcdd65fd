"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, unit of work,
hierarchy lookup, event bus).
"""

from app.application.interfaces import (
    IApprovalRequestRepository,
    IApprovalStageRepository,
    IApprovalWorkflowRepository,
    IEventPublisher,
    IHierarchyLookup,
    IStageExecutionRepository,
    IUnitOfWork,
)
from app.application.services.approver_resolver import ApproverResolver
from app.application.use_cases.approvals import (
    ApprovalRequestService,
    ApprovalWorkflowService,
)

__all__ = [
    "ApprovalRequestService",
    "ApprovalWorkflowService",
    "ApproverResolver",
    "IApprovalRequestRepository",
    "IApprovalStageRepository",
    "IApprovalWorkflowRepository",
    "IEventPublisher",
    "IHierarchyLookup",
    "IStageExecutionRepository",
    "IUnitOfWork",
]
