"""Approval request use cases: submission, decision processing and read paths.

Submission creates the request and one Pending execution per stage in a
single transaction. Decisions may arrive for any Pending execution in any
order; current_stage_order is a progress pointer, not a gate. Decisions on
the same request serialize on a row lock of the request, so completion is
always computed after sibling decisions have committed. Outcome
events are queued inside the transaction and published after it commits.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from app.application.dtos.approval import (
    ApprovalRequestCreate,
    ApprovalRequestDetails,
    ApprovalRequestResult,
    ApprovalWorkflowResult,
    DecisionResult,
    PendingApprovalResult,
    PendingApprovalsCount,
    StageDecision,
    StageExecutionCreate,
    StageExecutionResult,
    SubmissionResult,
)
from app.application.interfaces.repositories import (
    IApprovalRequestRepository,
    IApprovalStageRepository,
    IApprovalWorkflowRepository,
    IStageExecutionRepository,
)
from app.application.interfaces.services import IEventPublisher, IUnitOfWork
from app.application.services.approver_resolver import ApproverResolver
from app.domain.entities.approval import ApprovalProgress
from app.domain.enums import (
    ApprovalDecision,
    ApprovalRequestStatus,
    StageExecutionStatus,
)
from app.domain.events import (
    REQUEST_APPROVED,
    REQUEST_REJECTED,
    ApprovalOutcome,
    PendingEvent,
)
from app.domain.exceptions import (
    BadRequestException,
    ForbiddenException,
    ResourceNotFoundException,
)
from app.domain.value_objects.approval import ApprovalContext, approver_to_column
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class ApprovalRequestService:
    """Submits approval requests and processes stage decisions."""

    def __init__(
        self,
        uow: IUnitOfWork,
        workflow_repo: IApprovalWorkflowRepository,
        stage_repo: IApprovalStageRepository,
        request_repo: IApprovalRequestRepository,
        execution_repo: IStageExecutionRepository,
        approver_resolver: ApproverResolver,
        event_publisher: IEventPublisher | None = None,
        *,
        block_unassigned: bool = False,
    ) -> None:
        self._uow = uow
        self._workflow_repo = workflow_repo
        self._stage_repo = stage_repo
        self._request_repo = request_repo
        self._execution_repo = execution_repo
        self._approver_resolver = approver_resolver
        self._event_publisher = event_publisher
        self._block_unassigned = block_unassigned

    async def submit_request(
        self,
        workflow_code: str,
        entity_type: str,
        entity_id: str,
        context: ApprovalContext,
        requested_by: str,
    ) -> SubmissionResult:
        """Create a Pending request and one Pending execution per workflow stage.

        Args:
            workflow_code: Code of the workflow to run (e.g. 'agent_registration').
            entity_type: Business entity tag (e.g. 'Agent').
            entity_id: Id of the business entity.
            context: Forum/area/unit ids used to resolve hierarchy approvers.
            requested_by: User id of the submitter.

        Returns:
            The persisted request and its executions ordered by stage_order.

        Raises:
            ResourceNotFoundException: Workflow code is unknown.
            BadRequestException: Workflow inactive, has no stages, or the entity
                already has a Pending request.
        """
        async with self._uow.transaction():
            workflow = await self._workflow_repo.get_by_code(workflow_code)
            if workflow is None:
                raise ResourceNotFoundException("approval_workflow", workflow_code)
            if not workflow.is_active:
                raise BadRequestException(
                    f"Workflow {workflow_code} is not active",
                    workflow_code=workflow_code,
                )
            stages = await self._stage_repo.list_by_workflow(workflow.id)
            if not stages:
                raise BadRequestException(
                    "Workflow has no approval stages configured",
                    workflow_code=workflow_code,
                )
            existing = await self._request_repo.find_pending_by_entity(
                entity_type, entity_id
            )
            if existing is not None:
                raise BadRequestException(
                    f"An approval request for this {entity_type} is already pending",
                    entity_type=entity_type,
                    entity_id=entity_id,
                    request_id=existing.id,
                )

            approvers = await asyncio.gather(
                *(self._approver_resolver.resolve(stage, context) for stage in stages)
            )
            request = await self._request_repo.create_request(
                ApprovalRequestCreate(
                    workflow_id=workflow.id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    context=context,
                    requested_by=requested_by,
                    requested_at=utc_now(),
                )
            )
            executions = await self._execution_repo.create_executions(
                [
                    StageExecutionCreate(
                        request_id=request.id,
                        stage_id=stage.id,
                        stage_order=stage.stage_order,
                        assigned_approver_id=approver_to_column(approver),
                    )
                    for stage, approver in zip(stages, approvers, strict=True)
                ]
            )

        logger.info(
            "Submitted approval request %s (workflow=%s, %s %s, %d stages)",
            request.id,
            workflow_code,
            entity_type,
            entity_id,
            len(executions),
        )
        return SubmissionResult(request=request, executions=executions)

    async def process_approval(
        self,
        execution_id: str,
        decision: ApprovalDecision,
        reviewed_by: str,
        comments: str | None = None,
    ) -> DecisionResult:
        """Record a decision on one stage execution and update the request.

        A rejection rejects the whole request. An approval completes the request
        when every execution is Approved/Skipped, or, for workflows that do not
        require all stages, when the execution under the current stage pointer
        is Approved; otherwise the pointer advances by one.

        Raises:
            ResourceNotFoundException: Execution or request missing.
            BadRequestException: Execution or request no longer Pending
                (including losing a race against a concurrent decision).
            ForbiddenException: Reviewer is not the assigned approver.
        """
        events: list[PendingEvent] = []
        async with self._uow.transaction():
            execution = await self._execution_repo.get_by_id(execution_id)
            if execution is None:
                raise ResourceNotFoundException("approval_stage_execution", execution_id)
            if execution.status is not StageExecutionStatus.PENDING:
                raise BadRequestException(
                    f"This approval stage is already {execution.status.value}",
                    execution_id=execution_id,
                )
            self._authorize_reviewer(execution, reviewed_by)

            # Decisions on one request run one at a time from here on.
            request = await self._request_repo.get_for_update(execution.request_id)
            if request is None:
                raise ResourceNotFoundException("approval_request", execution.request_id)
            if request.status is not ApprovalRequestStatus.PENDING:
                raise BadRequestException(
                    f"Request is already {request.status.value}",
                    request_id=request.id,
                )

            workflow = await self._workflow_repo.get_by_id(request.workflow_id)
            if workflow is None:
                raise ResourceNotFoundException("approval_workflow", request.workflow_id)

            now = utc_now()
            updated_execution = await self._execution_repo.record_decision(
                execution_id,
                StageDecision(
                    status=decision.to_execution_status(),
                    decision=decision,
                    reviewed_by=reviewed_by,
                    reviewed_at=now,
                    comments=comments,
                ),
            )
            if updated_execution is None:
                raise BadRequestException(
                    "This approval stage was decided by a concurrent request",
                    execution_id=execution_id,
                )

            if decision is ApprovalDecision.REJECT:
                updated_request = await self._reject(
                    request, workflow, reviewed_by, now, comments, events
                )
            else:
                updated_request = await self._approve_or_advance(
                    request, workflow, reviewed_by, now, events
                )

        await self._publish(events)
        return DecisionResult(execution=updated_execution, request=updated_request)

    def _authorize_reviewer(
        self, execution: StageExecutionResult, reviewed_by: str
    ) -> None:
        assigned = execution.assigned_approver_id
        if assigned is None:
            if self._block_unassigned:
                raise ForbiddenException(
                    "This approval stage has no assigned approver",
                    execution_id=execution.id,
                )
            return
        if assigned != reviewed_by:
            raise ForbiddenException(execution_id=execution.id)

    async def _reject(
        self,
        request: ApprovalRequestResult,
        workflow: ApprovalWorkflowResult,
        reviewed_by: str,
        now: datetime,
        comments: str | None,
        events: list[PendingEvent],
    ) -> ApprovalRequestResult:
        updated = await self._request_repo.mark_rejected(
            request.id, reviewed_by, now, comments
        )
        if updated is None:
            raise BadRequestException(
                "Request was completed by a concurrent decision", request_id=request.id
            )
        logger.info("Approval request %s rejected by %s", request.id, reviewed_by)
        events.append(
            PendingEvent(
                REQUEST_REJECTED,
                ApprovalOutcome(
                    request_id=request.id,
                    workflow_code=workflow.code,
                    entity_type=request.entity_type,
                    entity_id=request.entity_id,
                    actor_user_id=reviewed_by,
                    acted_at=now,
                    reason=comments,
                ),
            )
        )
        return updated

    async def _approve_or_advance(
        self,
        request: ApprovalRequestResult,
        workflow: ApprovalWorkflowResult,
        reviewed_by: str,
        now: datetime,
        events: list[PendingEvent],
    ) -> ApprovalRequestResult:
        executions = await self._execution_repo.list_by_request(request.id)
        progress = ApprovalProgress.from_executions(
            current_stage_order=request.current_stage_order,
            requires_all_stages=workflow.requires_all_stages,
            executions=((e.stage_order, e.status) for e in executions),
        )
        if not progress.is_complete():
            updated = await self._request_repo.advance_stage(
                request.id, progress.next_stage_order()
            )
            if updated is None:
                raise BadRequestException(
                    "Request was completed by a concurrent decision",
                    request_id=request.id,
                )
            logger.debug(
                "Approval request %s advanced to stage %d",
                request.id,
                updated.current_stage_order,
            )
            return updated

        updated = await self._request_repo.mark_approved(request.id, reviewed_by, now)
        if updated is None:
            raise BadRequestException(
                "Request was completed by a concurrent decision", request_id=request.id
            )
        logger.info("Approval request %s approved by %s", request.id, reviewed_by)
        events.append(
            PendingEvent(
                REQUEST_APPROVED,
                ApprovalOutcome(
                    request_id=request.id,
                    workflow_code=workflow.code,
                    entity_type=request.entity_type,
                    entity_id=request.entity_id,
                    actor_user_id=reviewed_by,
                    acted_at=now,
                ),
            )
        )
        return updated

    async def _publish(self, events: list[PendingEvent]) -> None:
        """Publish after commit; failures are logged, never raised."""
        if self._event_publisher is None:
            return
        for event in events:
            try:
                await self._event_publisher.publish(event.name, event.outcome.to_payload())
            except Exception:
                logger.exception(
                    "Failed to publish %s for approval request %s",
                    event.name,
                    event.outcome.request_id,
                )

    async def get_pending_approvals(self, approver_id: str) -> list[PendingApprovalResult]:
        """Return Pending executions assigned to the approver."""
        return await self._execution_repo.list_pending_by_approver(approver_id)

    async def get_request_by_entity(
        self, entity_type: str, entity_id: str
    ) -> ApprovalRequestDetails:
        """Return the most recent Pending request for the entity and its executions.

        Returns an empty result (request None) when nothing is pending.
        """
        request = await self._request_repo.find_pending_by_entity(entity_type, entity_id)
        if request is None:
            return ApprovalRequestDetails(request=None)
        executions = await self._execution_repo.list_by_request(request.id)
        return ApprovalRequestDetails(request=request, executions=executions)

    async def get_request_by_id(self, request_id: str) -> ApprovalRequestDetails:
        """Return request with executions and workflow; raise if the request is unknown."""
        request = await self._request_repo.get_by_id(request_id)
        if request is None:
            raise ResourceNotFoundException("approval_request", request_id)
        executions = await self._execution_repo.list_by_request(request_id)
        workflow = await self._workflow_repo.get_by_id(request.workflow_id)
        return ApprovalRequestDetails(
            request=request, executions=executions, workflow=workflow
        )

    async def get_pending_approvals_count(self, user_id: str) -> PendingApprovalsCount:
        """Return the number of Pending executions for the user, by workflow code."""
        by_workflow = await self._execution_repo.count_pending_by_workflow(user_id)
        return PendingApprovalsCount(
            pending_count=sum(by_workflow.values()),
            by_workflow=by_workflow,
        )
