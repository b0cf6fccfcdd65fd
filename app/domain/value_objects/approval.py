"""Value objects for approval submission and approver assignment."""

from dataclasses import dataclass
from typing import Final

from app.domain.enums import OrganizationBody


@dataclass(frozen=True)
class ApprovalContext:
    """Hierarchy context captured when a request is submitted.

    Only the ids relevant to the workflow's stages need to be set; a stage
    whose organization body has no matching id resolves to UNASSIGNED.
    """

    forum_id: str | None = None
    area_id: str | None = None
    unit_id: str | None = None

    def id_for(self, body: OrganizationBody) -> str | None:
        """Return the context id for the given organizational level."""
        if body is OrganizationBody.UNIT:
            return self.unit_id
        if body is OrganizationBody.AREA:
            return self.area_id
        if body is OrganizationBody.FORUM:
            return self.forum_id
        return None


class Unassigned:
    """Sentinel for a stage whose approver could not be resolved.

    Persisted as a NULL assigned_approver_id. Use the module-level
    UNASSIGNED instance; identity comparison is intended.
    """

    _instance: "Unassigned | None" = None

    def __new__(cls) -> "Unassigned":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNASSIGNED"


UNASSIGNED: Final = Unassigned()

# Result of approver resolution: a user id or the UNASSIGNED sentinel.
type AssignedApprover = str | Unassigned


def approver_to_column(approver: AssignedApprover) -> str | None:
    """Map a resolution result to the nullable assigned_approver_id column."""
    return None if isinstance(approver, Unassigned) else approver


def approver_from_column(value: str | None) -> AssignedApprover:
    """Map a nullable assigned_approver_id column value back to a resolution result."""
    return UNASSIGNED if value is None else value
