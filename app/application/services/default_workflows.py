"""Default approval workflows and an idempotent seeder.

Stages that resolve through the hierarchy carry the organization body
they are approved at; Role stages keep the role code they are meant for
in role_id until roles are resolved per hierarchy level.
"""

from __future__ import annotations

from app.application.dtos.approval import ApprovalWorkflowCreate, ApprovalWorkflowResult
from app.application.use_cases.approvals.approval_workflows import ApprovalWorkflowService
from app.domain.entities.approval import StageSpec
from app.domain.enums import ApproverType, OrganizationBody
from app.domain.exceptions import ResourceNotFoundException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_HIERARCHY = ApproverType.HIERARCHY
_ROLE = ApproverType.ROLE

DEFAULT_WORKFLOWS: tuple[ApprovalWorkflowCreate, ...] = (
    ApprovalWorkflowCreate(
        code="agent_registration",
        name="Agent Registration Approval",
        description="Workflow for approving new agent registrations",
        module="Agents",
        entity_type="Agent",
        stages=[
            StageSpec("Unit Admin Review", 1, _HIERARCHY, organization_body=OrganizationBody.UNIT),
            StageSpec("Area Admin Review", 2, _HIERARCHY, organization_body=OrganizationBody.AREA),
            StageSpec(
                "Final Approval", 3, _ROLE,
                role_id="forum_admin", organization_body=OrganizationBody.FORUM,
            ),
        ],
    ),
    ApprovalWorkflowCreate(
        code="member_registration",
        name="Member Registration Approval",
        description="Workflow for approving new member registrations",
        module="Membership",
        entity_type="Member",
        stages=[
            StageSpec("Agent Review", 1, _HIERARCHY, organization_body=OrganizationBody.UNIT),
            StageSpec(
                "Unit Admin Verification", 2, _HIERARCHY,
                organization_body=OrganizationBody.UNIT,
            ),
            StageSpec(
                "Final Approval", 3, _ROLE,
                role_id="area_admin", organization_body=OrganizationBody.AREA,
            ),
        ],
    ),
    ApprovalWorkflowCreate(
        code="wallet_deposit",
        name="Wallet Deposit Approval",
        description="Workflow for approving wallet deposit requests",
        module="Wallet",
        entity_type="DepositRequest",
        requires_all_stages=False,
        stages=[
            StageSpec(
                "Unit Admin Verification", 1, _HIERARCHY,
                organization_body=OrganizationBody.UNIT,
            ),
            StageSpec(
                "Area Admin Approval", 2, _ROLE,
                role_id="area_admin", organization_body=OrganizationBody.AREA,
                is_optional=True,
            ),
        ],
    ),
    ApprovalWorkflowCreate(
        code="death_claim_approval",
        name="Death Claim Approval",
        description="Workflow for approving death benefit claims",
        module="Claims",
        entity_type="DeathClaim",
        stages=[
            StageSpec("Unit Admin Review", 1, _HIERARCHY, organization_body=OrganizationBody.UNIT),
            StageSpec(
                "Area Admin Verification", 2, _ROLE,
                role_id="area_admin", organization_body=OrganizationBody.AREA,
            ),
            StageSpec(
                "Forum Admin Final Approval", 3, _ROLE,
                role_id="forum_admin", organization_body=OrganizationBody.FORUM,
            ),
        ],
    ),
    ApprovalWorkflowCreate(
        code="cash_handover_to_super_admin",
        name="Cash Handover to Super Admin",
        description="Workflow for approving cash handovers to the super admin (final cash custody)",
        module="CashManagement",
        entity_type="CashHandover",
        stages=[
            StageSpec(
                "Super Admin Approval", 1, _ROLE,
                role_id="super_admin", organization_body=OrganizationBody.FORUM,
            ),
        ],
    ),
)


async def seed_default_workflows(
    service: ApprovalWorkflowService,
    workflows: tuple[ApprovalWorkflowCreate, ...] = DEFAULT_WORKFLOWS,
) -> list[ApprovalWorkflowResult]:
    """Create each workflow whose code does not exist yet; return the ones created."""
    created: list[ApprovalWorkflowResult] = []
    for data in workflows:
        try:
            await service.get_workflow_by_code(data.code)
        except ResourceNotFoundException:
            created.append(await service.create_workflow(data))
        else:
            logger.info("Approval workflow %s already exists; skipping", data.code)
    return created
