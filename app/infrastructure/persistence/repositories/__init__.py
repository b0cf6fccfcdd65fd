"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.approval_request_repo import (
    ApprovalRequestRepository,
    ApprovalStageExecutionRepository,
)
from app.infrastructure.persistence.repositories.approval_workflow_repo import (
    ApprovalStageRepository,
    ApprovalWorkflowRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.organization_repo import (
    SqlAlchemyHierarchyLookup,
)

__all__ = [
    "ApprovalRequestRepository",
    "ApprovalStageExecutionRepository",
    "ApprovalStageRepository",
    "ApprovalWorkflowRepository",
    "BaseRepository",
    "SqlAlchemyHierarchyLookup",
]
