"""Hierarchy lookup over forum/area/unit tables (implements IHierarchyLookup)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.enums import OrganizationBody
from app.infrastructure.persistence.models.organization import Area, Forum, Unit

_MODELS: dict[OrganizationBody, type[Forum] | type[Area] | type[Unit]] = {
    OrganizationBody.FORUM: Forum,
    OrganizationBody.AREA: Area,
    OrganizationBody.UNIT: Unit,
}


class SqlAlchemyHierarchyLookup:
    """Finds the admin user of a forum, area or unit.

    Each lookup runs in its own short-lived session so that the approvers of
    a submission can be resolved concurrently, outside the submitting
    transaction's session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_admin_user(
        self, organization_body: OrganizationBody, entity_id: str
    ) -> str | None:
        model = _MODELS.get(organization_body)
        if model is None:
            return None
        async with self._session_factory() as session:
            result = await session.execute(
                select(model.admin_user_id).where(model.id == entity_id)
            )
            return result.scalar_one_or_none()
