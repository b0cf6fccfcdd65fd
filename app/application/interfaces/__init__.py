"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IApprovalRequestRepository,
    IApprovalStageRepository,
    IApprovalWorkflowRepository,
    IStageExecutionRepository,
)
from app.application.interfaces.services import (
    IEventPublisher,
    IHierarchyLookup,
    IUnitOfWork,
)

__all__ = [
    "IApprovalRequestRepository",
    "IApprovalStageRepository",
    "IApprovalWorkflowRepository",
    "IEventPublisher",
    "IHierarchyLookup",
    "IStageExecutionRepository",
    "IUnitOfWork",
]
