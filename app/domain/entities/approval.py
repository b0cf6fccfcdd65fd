"""Approval domain entities: stage definitions and request progress.

ApprovalProgress holds the completion rule applied after every approval:
the request completes when every stage is Approved or Skipped, or, for
workflows that do not require all stages, when the stage under the
current pointer is Approved. Otherwise the pointer advances by one.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from app.domain.enums import (
    ApproverType,
    OrganizationBody,
    StageExecutionStatus,
)
from app.domain.exceptions import ValidationException

_COMPLETED_STATUSES = frozenset(
    {StageExecutionStatus.APPROVED, StageExecutionStatus.SKIPPED}
)


@dataclass(frozen=True)
class StageSpec:
    """Definition of one stage as supplied when a workflow is created or updated."""

    name: str
    stage_order: int
    approver_type: ApproverType
    user_id: str | None = None
    role_id: str | None = None
    organization_body: OrganizationBody | None = None
    is_optional: bool = False
    auto_approve: bool = False

    def validate(self) -> None:
        """Raise ValidationException when the approver policy is incomplete."""
        if self.stage_order < 1:
            raise ValidationException(
                f"Stage order must be a positive integer, got {self.stage_order}",
                field="stage_order",
            )
        if self.approver_type is ApproverType.SPECIFIC_USER and not self.user_id:
            raise ValidationException(
                f"Stage '{self.name}' uses SpecificUser but has no user_id",
                field="user_id",
            )
        if (
            self.approver_type in (ApproverType.HIERARCHY, ApproverType.ROLE)
            and self.organization_body is None
        ):
            raise ValidationException(
                f"Stage '{self.name}' uses {self.approver_type.value} but has no organization_body",
                field="organization_body",
            )


def validate_stage_set(stages: Iterable[StageSpec]) -> list[StageSpec]:
    """Validate each stage and that stage orders are unique; return stages sorted by order."""
    ordered = sorted(stages, key=lambda s: s.stage_order)
    if not ordered:
        raise ValidationException("A workflow needs at least one stage", field="stages")
    seen: set[int] = set()
    for stage in ordered:
        stage.validate()
        if stage.stage_order in seen:
            raise ValidationException(
                f"Duplicate stage order {stage.stage_order}", field="stage_order"
            )
        seen.add(stage.stage_order)
    return ordered


@dataclass(frozen=True)
class ApprovalProgress:
    """Snapshot of a pending request's stage statuses, read inside the decision transaction."""

    current_stage_order: int
    requires_all_stages: bool
    stage_statuses: tuple[tuple[int, StageExecutionStatus], ...]

    @classmethod
    def from_executions(
        cls,
        current_stage_order: int,
        requires_all_stages: bool,
        executions: Iterable[tuple[int, StageExecutionStatus]],
    ) -> "ApprovalProgress":
        return cls(
            current_stage_order=current_stage_order,
            requires_all_stages=requires_all_stages,
            stage_statuses=tuple(executions),
        )

    @property
    def all_approved(self) -> bool:
        return all(status in _COMPLETED_STATUSES for _, status in self.stage_statuses)

    @property
    def current_stage_approved(self) -> bool:
        for order, status in self.stage_statuses:
            if order == self.current_stage_order:
                return status is StageExecutionStatus.APPROVED
        return False

    def is_complete(self) -> bool:
        """Return whether the request becomes Approved with these statuses."""
        if self.all_approved:
            return True
        return not self.requires_all_stages and self.current_stage_approved

    def next_stage_order(self) -> int:
        """Return the pointer value after an approval that did not complete the request."""
        return self.current_stage_order + 1
