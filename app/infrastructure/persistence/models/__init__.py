"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.approval import (
    ApprovalRequest,
    ApprovalStage,
    ApprovalStageExecution,
    ApprovalWorkflow,
)
from app.infrastructure.persistence.models.mixins import (
    AuditedModel,
    CuidMixin,
    TimestampMixin,
    UserStampMixin,
)
from app.infrastructure.persistence.models.organization import Area, Forum, Unit

__all__ = [
    "ApprovalRequest",
    "ApprovalStage",
    "ApprovalStageExecution",
    "ApprovalWorkflow",
    "Area",
    "AuditedModel",
    "CuidMixin",
    "Forum",
    "TimestampMixin",
    "Unit",
    "UserStampMixin",
]
