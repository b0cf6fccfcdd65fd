"""In-memory fakes of the approval repository and service ports.

The fakes share one ApprovalStore. FakeUnitOfWork snapshots the store when a
transaction starts and restores it when the block raises, so rollback
behaves like the database.
"""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

import pytest

from app.application.dtos.approval import (
    ApprovalRequestCreate,
    ApprovalRequestResult,
    ApprovalStageResult,
    ApprovalWorkflowCreate,
    ApprovalWorkflowResult,
    ApprovalWorkflowUpdate,
    PendingApprovalResult,
    StageDecision,
    StageExecutionCreate,
    StageExecutionResult,
)
from app.application.services.approver_resolver import ApproverResolver
from app.application.services.default_workflows import DEFAULT_WORKFLOWS
from app.application.use_cases.approvals import (
    ApprovalRequestService,
    ApprovalWorkflowService,
)
from app.domain.entities.approval import StageSpec
from app.domain.enums import (
    ApprovalRequestStatus,
    OrganizationBody,
    StageExecutionStatus,
)
from app.domain.value_objects.approval import ApprovalContext

FIXED_NOW = datetime(2025, 3, 1, 9, 30, tzinfo=UTC)


@dataclass
class ApprovalStore:
    workflows: dict[str, ApprovalWorkflowResult] = field(default_factory=dict)
    stages: dict[str, ApprovalStageResult] = field(default_factory=dict)
    requests: dict[str, ApprovalRequestResult] = field(default_factory=dict)
    executions: dict[str, StageExecutionResult] = field(default_factory=dict)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def snapshot(self) -> tuple[dict, dict, dict, dict]:
        return (
            dict(self.workflows),
            dict(self.stages),
            dict(self.requests),
            dict(self.executions),
        )

    def restore(self, snap: tuple[dict, dict, dict, dict]) -> None:
        self.workflows, self.stages, self.requests, self.executions = (
            dict(part) for part in snap
        )


class FakeUnitOfWork:
    def __init__(self, store: ApprovalStore) -> None:
        self.store = store
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        snap = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.store.restore(snap)
            self.rollbacks += 1
            raise
        self.commits += 1


def _stage_from_spec(stage_id: str, workflow_id: str, spec: StageSpec) -> ApprovalStageResult:
    return ApprovalStageResult(
        id=stage_id,
        workflow_id=workflow_id,
        name=spec.name,
        stage_order=spec.stage_order,
        approver_type=spec.approver_type,
        user_id=spec.user_id,
        role_id=spec.role_id,
        organization_body=spec.organization_body,
        is_optional=spec.is_optional,
        auto_approve=spec.auto_approve,
    )


class FakeWorkflowRepository:
    def __init__(self, store: ApprovalStore) -> None:
        self.store = store

    async def get_by_id(self, workflow_id: str) -> ApprovalWorkflowResult | None:
        return self.store.workflows.get(workflow_id)

    async def get_by_code(self, code: str) -> ApprovalWorkflowResult | None:
        return next((w for w in self.store.workflows.values() if w.code == code), None)

    async def list_workflows(
        self, *, active_only: bool = True, module: str | None = None
    ) -> list[ApprovalWorkflowResult]:
        rows = [
            w
            for w in self.store.workflows.values()
            if (w.is_active or not active_only) and (module is None or w.module == module)
        ]
        return sorted(rows, key=lambda w: w.code)

    async def create_workflow(self, data: ApprovalWorkflowCreate) -> ApprovalWorkflowResult:
        workflow = ApprovalWorkflowResult(
            id=self.store.next_id("wf"),
            code=data.code,
            name=data.name,
            description=data.description,
            module=data.module,
            entity_type=data.entity_type,
            is_active=data.is_active,
            requires_all_stages=data.requires_all_stages,
            created_at=FIXED_NOW,
            created_by=data.created_by,
            updated_at=None,
            updated_by=None,
        )
        self.store.workflows[workflow.id] = workflow
        return workflow

    async def update_workflow(
        self, workflow_id: str, data: ApprovalWorkflowUpdate
    ) -> ApprovalWorkflowResult | None:
        workflow = self.store.workflows.get(workflow_id)
        if workflow is None:
            return None
        changes = {
            name: getattr(data, name)
            for name in (
                "name",
                "description",
                "module",
                "entity_type",
                "is_active",
                "requires_all_stages",
            )
            if getattr(data, name) is not None
        }
        workflow = replace(workflow, **changes, updated_by=data.updated_by, updated_at=FIXED_NOW)
        self.store.workflows[workflow_id] = workflow
        return workflow


class FakeStageRepository:
    def __init__(self, store: ApprovalStore) -> None:
        self.store = store

    async def list_by_workflow(self, workflow_id: str) -> list[ApprovalStageResult]:
        rows = [s for s in self.store.stages.values() if s.workflow_id == workflow_id]
        return sorted(rows, key=lambda s: s.stage_order)

    async def create_stages(
        self, workflow_id: str, stages: list[StageSpec]
    ) -> list[ApprovalStageResult]:
        created = []
        for spec in sorted(stages, key=lambda s: s.stage_order):
            stage = _stage_from_spec(self.store.next_id("st"), workflow_id, spec)
            self.store.stages[stage.id] = stage
            created.append(stage)
        return created

    async def update_stage(self, stage_id: str, stage: StageSpec) -> ApprovalStageResult | None:
        existing = self.store.stages.get(stage_id)
        if existing is None:
            return None
        updated = _stage_from_spec(stage_id, existing.workflow_id, stage)
        self.store.stages[stage_id] = updated
        return updated

    async def delete_stages(self, stage_ids: list[str]) -> None:
        for stage_id in stage_ids:
            self.store.stages.pop(stage_id, None)

    async def count_executions(self, stage_id: str) -> int:
        return sum(1 for e in self.store.executions.values() if e.stage_id == stage_id)


class FakeRequestRepository:
    def __init__(self, store: ApprovalStore) -> None:
        self.store = store
        self.locked: list[str] = []
        # Runs while the lock is "awaited", i.e. before the locked read.
        self.on_lock: Callable[[str], None] | None = None

    async def get_by_id(self, request_id: str) -> ApprovalRequestResult | None:
        return self.store.requests.get(request_id)

    async def get_for_update(self, request_id: str) -> ApprovalRequestResult | None:
        self.locked.append(request_id)
        if self.on_lock is not None:
            self.on_lock(request_id)
        return self.store.requests.get(request_id)

    async def find_pending_by_entity(
        self, entity_type: str, entity_id: str
    ) -> ApprovalRequestResult | None:
        pending = [
            r
            for r in self.store.requests.values()
            if r.entity_type == entity_type
            and r.entity_id == entity_id
            and r.status is ApprovalRequestStatus.PENDING
        ]
        return max(pending, key=lambda r: r.requested_at, default=None)

    async def create_request(self, data: ApprovalRequestCreate) -> ApprovalRequestResult:
        request = ApprovalRequestResult(
            id=self.store.next_id("req"),
            workflow_id=data.workflow_id,
            entity_type=data.entity_type,
            entity_id=data.entity_id,
            forum_id=data.context.forum_id,
            area_id=data.context.area_id,
            unit_id=data.context.unit_id,
            requested_by=data.requested_by,
            requested_at=data.requested_at,
            current_stage_order=1,
            status=ApprovalRequestStatus.PENDING,
        )
        self.store.requests[request.id] = request
        return request

    def _transition(self, request_id: str, **changes: Any) -> ApprovalRequestResult | None:
        request = self.store.requests.get(request_id)
        if request is None or request.status is not ApprovalRequestStatus.PENDING:
            return None
        updated = replace(request, **changes)
        self.store.requests[request_id] = updated
        return updated

    async def mark_approved(
        self, request_id: str, approved_by: str, approved_at: datetime
    ) -> ApprovalRequestResult | None:
        return self._transition(
            request_id,
            status=ApprovalRequestStatus.APPROVED,
            approved_by=approved_by,
            approved_at=approved_at,
        )

    async def mark_rejected(
        self,
        request_id: str,
        rejected_by: str,
        rejected_at: datetime,
        reason: str | None,
    ) -> ApprovalRequestResult | None:
        return self._transition(
            request_id,
            status=ApprovalRequestStatus.REJECTED,
            rejected_by=rejected_by,
            rejected_at=rejected_at,
            rejection_reason=reason,
        )

    async def advance_stage(
        self, request_id: str, next_stage_order: int
    ) -> ApprovalRequestResult | None:
        return self._transition(request_id, current_stage_order=next_stage_order)


class FakeExecutionRepository:
    def __init__(self, store: ApprovalStore) -> None:
        self.store = store
        self.fail_on_create = False

    async def get_by_id(self, execution_id: str) -> StageExecutionResult | None:
        return self.store.executions.get(execution_id)

    async def list_by_request(self, request_id: str) -> list[StageExecutionResult]:
        rows = [
            replace(e, stage_name=self.store.stages[e.stage_id].name)
            for e in self.store.executions.values()
            if e.request_id == request_id
        ]
        return sorted(rows, key=lambda e: e.stage_order)

    async def create_executions(
        self, executions: list[StageExecutionCreate]
    ) -> list[StageExecutionResult]:
        created = []
        for data in executions:
            execution = StageExecutionResult(
                id=self.store.next_id("ex"),
                request_id=data.request_id,
                stage_id=data.stage_id,
                stage_order=data.stage_order,
                assigned_approver_id=data.assigned_approver_id,
                status=StageExecutionStatus.PENDING,
            )
            self.store.executions[execution.id] = execution
            created.append(execution)
            if self.fail_on_create:
                raise RuntimeError("database connection lost")
        return created

    async def record_decision(
        self, execution_id: str, decision: StageDecision
    ) -> StageExecutionResult | None:
        execution = self.store.executions.get(execution_id)
        if execution is None or execution.status is not StageExecutionStatus.PENDING:
            return None
        updated = replace(
            execution,
            status=decision.status,
            decision=decision.decision,
            reviewed_by=decision.reviewed_by,
            reviewed_at=decision.reviewed_at,
            comments=decision.comments,
        )
        self.store.executions[execution_id] = updated
        return updated

    def _pending_for(self, approver_id: str) -> list[StageExecutionResult]:
        return [
            e
            for e in self.store.executions.values()
            if e.assigned_approver_id == approver_id
            and e.status is StageExecutionStatus.PENDING
        ]

    async def list_pending_by_approver(self, approver_id: str) -> list[PendingApprovalResult]:
        results = []
        for e in self._pending_for(approver_id):
            request = self.store.requests[e.request_id]
            results.append(
                PendingApprovalResult(
                    execution_id=e.id,
                    request_id=e.request_id,
                    stage_id=e.stage_id,
                    stage_name=self.store.stages[e.stage_id].name,
                    stage_order=e.stage_order,
                    status=e.status,
                    assigned_approver_id=e.assigned_approver_id,
                    workflow_code=self.store.workflows[request.workflow_id].code,
                    entity_type=request.entity_type,
                    entity_id=request.entity_id,
                    requested_at=request.requested_at,
                )
            )
        return results

    async def count_pending_by_workflow(self, approver_id: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        for e in self._pending_for(approver_id):
            request = self.store.requests[e.request_id]
            code = self.store.workflows[request.workflow_id].code
            counts[code] = counts.get(code, 0) + 1
        return counts


class FakeHierarchyLookup:
    """Admin users keyed by (organization body, entity id)."""

    def __init__(self, admins: dict[tuple[OrganizationBody, str], str] | None = None) -> None:
        self.admins = dict(admins or {})
        self.calls: list[tuple[OrganizationBody, str]] = []

    async def find_admin_user(
        self, organization_body: OrganizationBody, entity_id: str
    ) -> str | None:
        self.calls.append((organization_body, entity_id))
        return self.admins.get((organization_body, entity_id))


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.fail = False

    async def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("event bus unavailable")
        self.events.append((event_name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@dataclass
class ApprovalHarness:
    store: ApprovalStore
    uow: FakeUnitOfWork
    workflow_repo: FakeWorkflowRepository
    stage_repo: FakeStageRepository
    request_repo: FakeRequestRepository
    execution_repo: FakeExecutionRepository
    lookup: FakeHierarchyLookup
    publisher: RecordingPublisher
    workflows: ApprovalWorkflowService
    requests: ApprovalRequestService

    def request_service(self, **kwargs: Any) -> ApprovalRequestService:
        """Build another request service over the same store (e.g. block_unassigned=True)."""
        return ApprovalRequestService(
            uow=self.uow,
            workflow_repo=self.workflow_repo,
            stage_repo=self.stage_repo,
            request_repo=self.request_repo,
            execution_repo=self.execution_repo,
            approver_resolver=ApproverResolver(self.lookup),
            event_publisher=self.publisher,
            **kwargs,
        )


@pytest.fixture
def hierarchy_admins() -> dict[tuple[OrganizationBody, str], str]:
    """Forum F1 ⊃ Area A1 ⊃ Unit U1 with one admin each."""
    return {
        (OrganizationBody.UNIT, "U1"): "unit-admin",
        (OrganizationBody.AREA, "A1"): "area-admin",
        (OrganizationBody.FORUM, "F1"): "forum-admin",
    }


@pytest.fixture
def approvals(hierarchy_admins) -> ApprovalHarness:
    """Approval services over in-memory repositories."""
    store = ApprovalStore()
    uow = FakeUnitOfWork(store)
    workflow_repo = FakeWorkflowRepository(store)
    stage_repo = FakeStageRepository(store)
    request_repo = FakeRequestRepository(store)
    execution_repo = FakeExecutionRepository(store)
    lookup = FakeHierarchyLookup(hierarchy_admins)
    publisher = RecordingPublisher()
    harness = ApprovalHarness(
        store=store,
        uow=uow,
        workflow_repo=workflow_repo,
        stage_repo=stage_repo,
        request_repo=request_repo,
        execution_repo=execution_repo,
        lookup=lookup,
        publisher=publisher,
        workflows=ApprovalWorkflowService(uow, workflow_repo, stage_repo),
        requests=None,  # type: ignore[arg-type]
    )
    harness.requests = harness.request_service()
    return harness


@pytest.fixture
def agent_context() -> ApprovalContext:
    """Submission context inside Forum F1 / Area A1 / Unit U1."""
    return ApprovalContext(forum_id="F1", area_id="A1", unit_id="U1")


@pytest.fixture
async def agent_workflow(approvals: ApprovalHarness) -> ApprovalWorkflowResult:
    """The default agent_registration workflow: Unit, Area, then Forum admin."""
    return await approvals.workflows.create_workflow(DEFAULT_WORKFLOWS[0])
