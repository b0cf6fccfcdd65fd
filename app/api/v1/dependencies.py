"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the DB session, the current user and the
approval use cases. Routes depend only on these; repositories and other
infrastructure are wired here.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.approver_resolver import ApproverResolver
from app.application.use_cases.approvals import (
    ApprovalRequestService,
    ApprovalWorkflowService,
)
from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException
from app.infrastructure.messaging import EventBus, get_event_bus
from app.infrastructure.persistence.database import get_db, get_session_factory
from app.infrastructure.persistence.repositories import (
    ApprovalRequestRepository,
    ApprovalStageExecutionRepository,
    ApprovalStageRepository,
    ApprovalWorkflowRepository,
    SqlAlchemyHierarchyLookup,
)
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from app.infrastructure.security.jwt import get_token_subject

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str:
    """Return the acting user id (JWT sub); raise 401 if missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        return get_token_subject(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from e


def get_approver_resolver() -> ApproverResolver:
    """Approver resolver backed by the forum/area/unit tables."""
    return ApproverResolver(SqlAlchemyHierarchyLookup(get_session_factory()))


def get_event_publisher() -> EventBus:
    """Process-wide event bus receiving RequestApproved/RequestRejected."""
    return get_event_bus()


async def get_approval_workflow_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApprovalWorkflowService:
    """Workflow administration use cases on the request session."""
    return ApprovalWorkflowService(
        uow=SqlAlchemyUnitOfWork(db),
        workflow_repo=ApprovalWorkflowRepository(db),
        stage_repo=ApprovalStageRepository(db),
    )


async def get_approval_request_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    resolver: Annotated[ApproverResolver, Depends(get_approver_resolver)],
    publisher: Annotated[EventBus, Depends(get_event_publisher)],
) -> ApprovalRequestService:
    """Submission, decision and read use cases on the request session."""
    return ApprovalRequestService(
        uow=SqlAlchemyUnitOfWork(db),
        workflow_repo=ApprovalWorkflowRepository(db),
        stage_repo=ApprovalStageRepository(db),
        request_repo=ApprovalRequestRepository(db),
        execution_repo=ApprovalStageExecutionRepository(db),
        approver_resolver=resolver,
        event_publisher=publisher,
        block_unassigned=get_settings().approval_block_unassigned,
    )
