"""ApproverResolver unit tests with a mocked hierarchy lookup."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.approval import ApprovalStageResult
from app.application.services.approver_resolver import ApproverResolver
from app.domain.enums import ApproverType, OrganizationBody
from app.domain.value_objects.approval import UNASSIGNED, ApprovalContext

CONTEXT = ApprovalContext(forum_id="F1", area_id="A1", unit_id="U1")


def _stage(
    approver_type: ApproverType,
    *,
    user_id: str | None = None,
    role_id: str | None = None,
    organization_body: OrganizationBody | None = None,
) -> ApprovalStageResult:
    return ApprovalStageResult(
        id="st1",
        workflow_id="wf1",
        name="Review",
        stage_order=1,
        approver_type=approver_type,
        user_id=user_id,
        role_id=role_id,
        organization_body=organization_body,
        is_optional=False,
        auto_approve=False,
    )


@pytest.fixture
def lookup() -> AsyncMock:
    lookup = AsyncMock()
    lookup.find_admin_user = AsyncMock(return_value="area-admin")
    return lookup


async def test_specific_user_returns_configured_user(lookup) -> None:
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(_stage(ApproverType.SPECIFIC_USER, user_id="u42"), CONTEXT)
    assert result == "u42"
    lookup.find_admin_user.assert_not_awaited()


async def test_specific_user_without_user_id_is_unassigned(lookup) -> None:
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(_stage(ApproverType.SPECIFIC_USER), CONTEXT)
    assert result is UNASSIGNED


async def test_hierarchy_looks_up_admin_of_context_body(lookup) -> None:
    """Hierarchy stage at Area level asks for the admin of the context's area."""
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(
        _stage(ApproverType.HIERARCHY, organization_body=OrganizationBody.AREA), CONTEXT
    )
    assert result == "area-admin"
    lookup.find_admin_user.assert_awaited_once_with(OrganizationBody.AREA, "A1")


async def test_hierarchy_without_context_id_is_unassigned(lookup) -> None:
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(
        _stage(ApproverType.HIERARCHY, organization_body=OrganizationBody.UNIT),
        ApprovalContext(forum_id="F1"),
    )
    assert result is UNASSIGNED
    lookup.find_admin_user.assert_not_awaited()


async def test_hierarchy_without_admin_is_unassigned(lookup) -> None:
    lookup.find_admin_user = AsyncMock(return_value=None)
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(
        _stage(ApproverType.HIERARCHY, organization_body=OrganizationBody.FORUM), CONTEXT
    )
    assert result is UNASSIGNED


async def test_hierarchy_without_lookup_is_unassigned() -> None:
    resolver = ApproverResolver()
    result = await resolver.resolve(
        _stage(ApproverType.HIERARCHY, organization_body=OrganizationBody.FORUM), CONTEXT
    )
    assert result is UNASSIGNED


async def test_role_resolves_like_hierarchy_and_ignores_role_id(lookup) -> None:
    """Role stages resolve to the admin of their organization body; role_id is not matched."""
    lookup.find_admin_user = AsyncMock(return_value="forum-admin")
    resolver = ApproverResolver(lookup)
    result = await resolver.resolve(
        _stage(
            ApproverType.ROLE,
            role_id="forum_admin",
            organization_body=OrganizationBody.FORUM,
        ),
        CONTEXT,
    )
    assert result == "forum-admin"
    lookup.find_admin_user.assert_awaited_once_with(OrganizationBody.FORUM, "F1")


async def test_unknown_approver_type_is_unassigned(lookup) -> None:
    resolver = ApproverResolver(lookup)
    stage = _stage(ApproverType.SPECIFIC_USER, user_id="u1")
    object.__setattr__(stage, "approver_type", "Committee")
    result = await resolver.resolve(stage, CONTEXT)
    assert result is UNASSIGNED
