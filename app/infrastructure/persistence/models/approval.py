"""Approval workflow ORM models: workflow, stage, request, stage execution."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    ApproverType,
    OrganizationBody,
    StageExecutionStatus,
)
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AuditedModel,
    CuidMixin,
    TimestampMixin,
)


def _in_check(column: str, values: list[str], name: str, nullable: bool = False) -> CheckConstraint:
    """CHECK constraint restricting a string column to enum values."""
    allowed = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    expr = f"{column} IN ({allowed})"
    if nullable:
        expr = f"{column} IS NULL OR {expr}"
    return CheckConstraint(expr, name=name)


class ApprovalWorkflow(AuditedModel, Base):
    """Workflow definition. Table: approval_workflow."""

    __tablename__ = "approval_workflow"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    module: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
    requires_all_stages: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )


class ApprovalStage(CuidMixin, TimestampMixin, Base):
    """Ordered stage of a workflow. Table: approval_stage."""

    __tablename__ = "approval_stage"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("approval_workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    stage_order: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_type: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    role_id: Mapped[str | None] = mapped_column(String, nullable=True)
    organization_body: Mapped[str | None] = mapped_column(String, nullable=True)
    is_optional: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    auto_approve: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )

    __table_args__ = (
        UniqueConstraint("workflow_id", "stage_order", name="uq_approval_stage_workflow_order"),
        CheckConstraint("stage_order > 0", name="approval_stage_order_positive"),
        _in_check("approver_type", ApproverType.values(), "approval_stage_approver_type_check"),
        _in_check(
            "organization_body",
            OrganizationBody.values(),
            "approval_stage_organization_body_check",
            nullable=True,
        ),
    )


class ApprovalRequest(CuidMixin, TimestampMixin, Base):
    """One run of a workflow against a business entity. Table: approval_request."""

    __tablename__ = "approval_request"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("approval_workflow.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    forum_id: Mapped[str | None] = mapped_column(String, nullable=True)
    area_id: Mapped[str | None] = mapped_column(String, nullable=True)
    unit_id: Mapped[str | None] = mapped_column(String, nullable=True)
    requested_by: Mapped[str] = mapped_column(String, nullable=False)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    current_stage_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=sa.text("1")
    )
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=ApprovalRequestStatus.PENDING.value,
        index=True,
    )
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String, nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_approval_request_entity", "entity_type", "entity_id"),
        # At most one pending request per entity.
        Index(
            "uq_approval_request_pending_entity",
            "entity_type",
            "entity_id",
            unique=True,
            postgresql_where=sa.text("status = 'Pending'"),
        ),
        _in_check("status", ApprovalRequestStatus.values(), "approval_request_status_check"),
    )


class ApprovalStageExecution(CuidMixin, TimestampMixin, Base):
    """Assignment and decision for one stage of one request. Table: approval_stage_execution."""

    __tablename__ = "approval_stage_execution"

    request_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("approval_request.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("approval_stage.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    stage_order: Mapped[int] = mapped_column(Integer, nullable=False)
    assigned_approver_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=StageExecutionStatus.PENDING.value,
    )
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    decision: Mapped[str | None] = mapped_column(String, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("request_id", "stage_id", name="uq_approval_execution_request_stage"),
        Index(
            "ix_approval_execution_approver_status",
            "assigned_approver_id",
            "status",
        ),
        _in_check("status", StageExecutionStatus.values(), "approval_execution_status_check"),
        _in_check(
            "decision",
            ApprovalDecision.values(),
            "approval_execution_decision_check",
            nullable=True,
        ),
    )
