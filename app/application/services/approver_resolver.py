"""Approver resolution: map a stage definition and submission context to an approver.

One resolver per ApproverType. Role stages currently resolve exactly like
Hierarchy stages (the administrator of the stage's organization body);
role_id is carried on the stage but not used for matching.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from app.application.dtos.approval import ApprovalStageResult
from app.application.interfaces.services import IHierarchyLookup
from app.domain.enums import ApproverType
from app.domain.value_objects.approval import (
    UNASSIGNED,
    ApprovalContext,
    AssignedApprover,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_Resolver = Callable[[ApprovalStageResult, ApprovalContext], Awaitable[AssignedApprover]]


class ApproverResolver:
    """Resolves the approver of each stage at submission time."""

    def __init__(self, hierarchy_lookup: IHierarchyLookup | None = None) -> None:
        self._hierarchy_lookup = hierarchy_lookup
        self._resolvers: dict[ApproverType, _Resolver] = {
            ApproverType.SPECIFIC_USER: self._resolve_specific_user,
            ApproverType.HIERARCHY: self._resolve_hierarchy,
            ApproverType.ROLE: self._resolve_role,
        }

    async def resolve(
        self, stage: ApprovalStageResult, context: ApprovalContext
    ) -> AssignedApprover:
        """Return the approver user id for the stage, or UNASSIGNED."""
        resolver = self._resolvers.get(stage.approver_type)
        if resolver is None:
            logger.warning(
                "Unsupported approver type %r on stage %s; leaving unassigned",
                stage.approver_type,
                stage.id,
            )
            return UNASSIGNED
        approver = await resolver(stage, context)
        if approver is UNASSIGNED:
            logger.info(
                "Stage %s (order %d, %s) has no resolvable approver",
                stage.id,
                stage.stage_order,
                stage.approver_type.value,
            )
        return approver

    async def _resolve_specific_user(
        self, stage: ApprovalStageResult, context: ApprovalContext
    ) -> AssignedApprover:
        return stage.user_id or UNASSIGNED

    async def _resolve_hierarchy(
        self, stage: ApprovalStageResult, context: ApprovalContext
    ) -> AssignedApprover:
        if stage.organization_body is None or self._hierarchy_lookup is None:
            return UNASSIGNED
        entity_id = context.id_for(stage.organization_body)
        if not entity_id:
            logger.debug(
                "No %s id in submission context for stage %s",
                stage.organization_body.value,
                stage.id,
            )
            return UNASSIGNED
        admin_id = await self._hierarchy_lookup.find_admin_user(
            stage.organization_body, entity_id
        )
        return admin_id or UNASSIGNED

    async def _resolve_role(
        self, stage: ApprovalStageResult, context: ApprovalContext
    ) -> AssignedApprover:
        # TODO: match users holding stage.role_id once role assignments are scoped to hierarchy levels.
        if stage.role_id:
            logger.debug(
                "Role stage %s resolved via hierarchy admin; role_id %s not matched",
                stage.id,
                stage.role_id,
            )
        return await self._resolve_hierarchy(stage, context)
