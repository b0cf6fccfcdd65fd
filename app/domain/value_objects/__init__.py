"""Domain value objects and shared value types."""

from app.domain.value_objects.approval import (
    UNASSIGNED,
    ApprovalContext,
    AssignedApprover,
    Unassigned,
    approver_from_column,
    approver_to_column,
)

__all__ = [
    "ApprovalContext",
    "AssignedApprover",
    "UNASSIGNED",
    "Unassigned",
    "approver_from_column",
    "approver_to_column",
]
