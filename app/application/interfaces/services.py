"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators of the approval services (DIP).
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from app.domain.enums import OrganizationBody


# Hierarchy lookup interface
class IHierarchyLookup(Protocol):
    """Protocol for finding the administrator of a forum, area or unit."""

    async def find_admin_user(
        self, organization_body: OrganizationBody, entity_id: str
    ) -> str | None:
        """Return the admin user id of the entity, or None when unknown."""


# Event publisher interface
class IEventPublisher(Protocol):
    """Protocol for fire-and-forget publication of domain events."""

    async def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Deliver the event to subscribers. Handler failures must not propagate."""


# Unit of work interface
class IUnitOfWork(Protocol):
    """Protocol for an atomic unit of work shared by the repositories of one operation."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Return a context manager that commits on exit and rolls back on exception."""
