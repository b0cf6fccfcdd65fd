"""Integrity error mapping in the approval repositories, with a mocked AsyncSession."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from app.application.dtos.approval import ApprovalRequestCreate, ApprovalWorkflowCreate
from app.domain.exceptions import BadRequestException, ConflictException
from app.domain.value_objects.approval import ApprovalContext
from app.infrastructure.persistence.repositories import (
    ApprovalRequestRepository,
    ApprovalWorkflowRepository,
)


def _session_failing_with(message: str) -> MagicMock:
    session = MagicMock()
    session.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception(message)))
    session.refresh = AsyncMock()
    return session


def _request_data() -> ApprovalRequestCreate:
    return ApprovalRequestCreate(
        workflow_id="wf1",
        entity_type="Agent",
        entity_id="agent-1",
        context=ApprovalContext(unit_id="U1"),
        requested_by="submitter",
        requested_at=datetime(2025, 3, 1, tzinfo=UTC),
    )


async def test_pending_index_violation_is_already_pending() -> None:
    session = _session_failing_with(
        'duplicate key value violates unique constraint "uq_approval_request_pending_entity"'
    )

    with pytest.raises(BadRequestException, match="already pending") as exc_info:
        await ApprovalRequestRepository(session).create_request(_request_data())

    assert exc_info.value.details == {"entity_type": "Agent", "entity_id": "agent-1"}


@pytest.mark.parametrize(
    "message",
    [
        'insert or update on table "approval_request" violates foreign key constraint '
        '"approval_request_workflow_id_fkey"',
        'new row for relation "approval_request" violates check constraint '
        '"approval_request_status_check"',
    ],
)
async def test_other_integrity_errors_propagate(message: str) -> None:
    session = _session_failing_with(message)

    with pytest.raises(IntegrityError):
        await ApprovalRequestRepository(session).create_request(_request_data())


async def test_duplicate_workflow_code_is_conflict() -> None:
    session = _session_failing_with(
        'duplicate key value violates unique constraint "approval_workflow_code_key"'
    )
    data = ApprovalWorkflowCreate(
        code="agent_registration",
        name="Agent Registration",
        module="Agents",
        entity_type="Agent",
        stages=[],
    )

    with pytest.raises(ConflictException) as exc_info:
        await ApprovalWorkflowRepository(session).create_workflow(data)

    assert exc_info.value.error_code == "CONFLICT"
    assert exc_info.value.details["code"] == "agent_registration"
