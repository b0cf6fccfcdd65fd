"""Domain enumerations for the approvals application.

Enums represent fixed sets of domain values. Values match the strings
stored in the database and exchanged over the API (e.g. 'Pending').
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ApproverType(_ValuesMixin, str, Enum):
    """How the approver of a stage is determined at submission time."""

    SPECIFIC_USER = "SpecificUser"
    ROLE = "Role"
    HIERARCHY = "Hierarchy"


class OrganizationBody(_ValuesMixin, str, Enum):
    """Level of the organizational hierarchy (Forum contains Areas contain Units)."""

    UNIT = "Unit"
    AREA = "Area"
    FORUM = "Forum"


class ApprovalRequestStatus(_ValuesMixin, str, Enum):
    """Approval request lifecycle. Approved and Rejected are terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalRequestStatus.PENDING


class StageExecutionStatus(_ValuesMixin, str, Enum):
    """Stage execution lifecycle. Every non-Pending status is terminal.

    Skipped is never produced by decision processing; administrative tooling
    may set it and it counts as approved for completion.
    """

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    SKIPPED = "Skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not StageExecutionStatus.PENDING


class ApprovalDecision(_ValuesMixin, str, Enum):
    """Reviewer decision on a stage execution."""

    APPROVE = "Approve"
    REJECT = "Reject"

    def to_execution_status(self) -> StageExecutionStatus:
        """Return the execution status this decision moves the stage to."""
        if self is ApprovalDecision.APPROVE:
            return StageExecutionStatus.APPROVED
        return StageExecutionStatus.REJECTED
