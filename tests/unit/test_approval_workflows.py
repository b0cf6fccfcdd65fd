"""ApprovalWorkflowService and default workflow seeding over in-memory repositories."""

from dataclasses import replace

import pytest

from app.application.dtos.approval import ApprovalWorkflowCreate, ApprovalWorkflowUpdate
from app.application.services.default_workflows import (
    DEFAULT_WORKFLOWS,
    seed_default_workflows,
)
from app.domain.entities.approval import StageSpec, validate_stage_set
from app.domain.enums import ApproverType, OrganizationBody
from app.domain.exceptions import (
    BadRequestException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)


def _workflow(code: str = "loan_approval", *stages: StageSpec, **kwargs) -> ApprovalWorkflowCreate:
    return ApprovalWorkflowCreate(
        code=code,
        name="Loan Approval",
        module="Loans",
        entity_type="Loan",
        stages=list(stages)
        or [
            StageSpec("Officer", 1, ApproverType.SPECIFIC_USER, user_id="officer"),
            StageSpec(
                "Forum Admin", 2, ApproverType.HIERARCHY,
                organization_body=OrganizationBody.FORUM,
            ),
        ],
        **kwargs,
    )


async def test_create_workflow_returns_ordered_stages(approvals) -> None:
    stages = _workflow().stages
    created = await approvals.workflows.create_workflow(
        _workflow("loan_approval", stages[1], stages[0], created_by="admin")
    )

    assert created.code == "loan_approval"
    assert created.created_by == "admin"
    assert created.requires_all_stages is True
    assert [s.stage_order for s in created.stages] == [1, 2]
    assert [s.name for s in created.stages] == ["Officer", "Forum Admin"]


async def test_create_workflow_duplicate_code_conflicts(approvals) -> None:
    await approvals.workflows.create_workflow(_workflow())
    with pytest.raises(ConflictException):
        await approvals.workflows.create_workflow(_workflow())
    assert len(approvals.store.workflows) == 1


async def test_create_workflow_validates_stages(approvals) -> None:
    with pytest.raises(ValidationException):
        await approvals.workflows.create_workflow(
            _workflow("bad", StageSpec("Officer", 1, ApproverType.SPECIFIC_USER))
        )
    assert approvals.store.workflows == {}


async def test_get_and_list_workflows(approvals) -> None:
    loan = await approvals.workflows.create_workflow(_workflow())
    await approvals.workflows.create_workflow(
        _workflow("old_loan", is_active=False)
    )

    assert (await approvals.workflows.get_workflow_by_id(loan.id)).code == "loan_approval"
    by_code = await approvals.workflows.get_workflow_by_code("loan_approval")
    assert len(by_code.stages) == 2

    active = await approvals.workflows.list_active_workflows()
    assert [w.code for w in active] == ["loan_approval"]
    assert await approvals.workflows.list_active_workflows(module="Agents") == []
    every = await approvals.workflows.list_all_workflows()
    assert [w.code for w in every] == ["loan_approval", "old_loan"]

    with pytest.raises(ResourceNotFoundException):
        await approvals.workflows.get_workflow_by_code("missing")
    with pytest.raises(ResourceNotFoundException):
        await approvals.workflows.get_workflow_by_id("missing")


async def test_update_workflow_attributes(approvals) -> None:
    loan = await approvals.workflows.create_workflow(_workflow())

    updated = await approvals.workflows.update_workflow(
        loan.id,
        ApprovalWorkflowUpdate(name="Loan Sign-off", requires_all_stages=False, updated_by="admin"),
    )

    assert updated.name == "Loan Sign-off"
    assert updated.requires_all_stages is False
    assert updated.module == "Loans"
    assert updated.updated_by == "admin"
    assert len(updated.stages) == 2


async def test_update_unknown_workflow_raises(approvals) -> None:
    with pytest.raises(ResourceNotFoundException):
        await approvals.workflows.update_workflow("missing", ApprovalWorkflowUpdate(name="x"))


async def test_update_replaces_stage_set_matched_by_order(approvals) -> None:
    """Order 1 is updated in place, order 2 removed, order 3 added."""
    loan = await approvals.workflows.create_workflow(_workflow())
    stage_one_id = loan.stages[0].id

    updated = await approvals.workflows.update_workflow(
        loan.id,
        ApprovalWorkflowUpdate(
            stages=[
                StageSpec("Senior Officer", 1, ApproverType.SPECIFIC_USER, user_id="senior"),
                StageSpec(
                    "Area Admin", 3, ApproverType.HIERARCHY,
                    organization_body=OrganizationBody.AREA,
                ),
            ]
        ),
    )

    assert [(s.stage_order, s.name) for s in updated.stages] == [
        (1, "Senior Officer"),
        (3, "Area Admin"),
    ]
    assert updated.stages[0].id == stage_one_id
    assert updated.stages[0].user_id == "senior"


async def test_stage_with_executions_cannot_be_removed(approvals, agent_context) -> None:
    loan = await approvals.workflows.create_workflow(_workflow())
    await approvals.requests.submit_request(
        "loan_approval", "Loan", "loan-1", agent_context, "submitter"
    )

    with pytest.raises(BadRequestException, match="cannot be removed"):
        await approvals.workflows.update_workflow(
            loan.id, ApprovalWorkflowUpdate(stages=[_workflow().stages[0]])
        )
    assert len(await approvals.stage_repo.list_by_workflow(loan.id)) == 2


async def test_seed_default_workflows_is_idempotent(approvals) -> None:
    created = await seed_default_workflows(approvals.workflows)
    assert [w.code for w in created] == [w.code for w in DEFAULT_WORKFLOWS]
    assert {w.code for w in created} == {
        "agent_registration",
        "member_registration",
        "wallet_deposit",
        "death_claim_approval",
        "cash_handover_to_super_admin",
    }

    again = await seed_default_workflows(approvals.workflows)
    assert again == []
    assert len(approvals.store.workflows) == len(DEFAULT_WORKFLOWS)


async def test_seed_skips_existing_codes(approvals) -> None:
    agent = DEFAULT_WORKFLOWS[0]
    await approvals.workflows.create_workflow(replace(agent, name="Customised"))

    created = await seed_default_workflows(approvals.workflows)

    assert agent.code not in {w.code for w in created}
    assert (await approvals.workflows.get_workflow_by_code(agent.code)).name == "Customised"


def test_default_workflow_definitions_are_valid() -> None:
    """Every default workflow passes stage validation; wallet_deposit is any-stage."""
    for workflow in DEFAULT_WORKFLOWS:
        validate_stage_set(workflow.stages)
    deposit = next(w for w in DEFAULT_WORKFLOWS if w.code == "wallet_deposit")
    assert deposit.requires_all_stages is False
