"""Domain layer: entities, value objects, enums, events, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import ApprovalProgress, StageSpec
from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    ApproverType,
    OrganizationBody,
    StageExecutionStatus,
)
from app.domain.events import REQUEST_APPROVED, REQUEST_REJECTED, ApprovalOutcome
from app.domain.exceptions import (
    ApprovalsException,
    AuthenticationException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects import UNASSIGNED, ApprovalContext

__all__ = [
    # Entities
    "ApprovalProgress",
    "StageSpec",
    # Enums
    "ApprovalDecision",
    "ApprovalRequestStatus",
    "ApproverType",
    "OrganizationBody",
    "StageExecutionStatus",
    # Events
    "ApprovalOutcome",
    "REQUEST_APPROVED",
    "REQUEST_REJECTED",
    # Exceptions
    "ApprovalsException",
    "AuthenticationException",
    "BadRequestException",
    "ConflictException",
    "ForbiddenException",
    "ResourceNotFoundException",
    "ValidationException",
    # Value objects
    "ApprovalContext",
    "UNASSIGNED",
]
