"""Approvals API: thin routes delegating to ApprovalWorkflowService and ApprovalRequestService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_approval_request_service,
    get_approval_workflow_service,
    get_current_user_id,
)
from app.application.use_cases.approvals import (
    ApprovalRequestService,
    ApprovalWorkflowService,
)
from app.schemas.approval import (
    ApprovalDecisionRequest,
    ApprovalDecisionResponse,
    ApprovalRequestDetailsResponse,
    ApprovalSubmissionResponse,
    ApprovalSubmitRequest,
    ApprovalWorkflowCreateRequest,
    ApprovalWorkflowResponse,
    ApprovalWorkflowUpdateRequest,
    PendingApprovalResponse,
    PendingApprovalsCountResponse,
)

router = APIRouter()

CurrentUserId = Annotated[str, Depends(get_current_user_id)]
WorkflowService = Annotated[ApprovalWorkflowService, Depends(get_approval_workflow_service)]
RequestService = Annotated[ApprovalRequestService, Depends(get_approval_request_service)]


# ---- Workflows ----


@router.post("/workflows", response_model=ApprovalWorkflowResponse, status_code=201)
async def create_workflow(
    body: ApprovalWorkflowCreateRequest,
    user_id: CurrentUserId,
    service: WorkflowService,
):
    """Create a workflow with its stages."""
    workflow = await service.create_workflow(body.to_create(created_by=user_id))
    return ApprovalWorkflowResponse.model_validate(workflow)


@router.put("/workflows/{workflow_id}", response_model=ApprovalWorkflowResponse)
async def update_workflow(
    workflow_id: str,
    body: ApprovalWorkflowUpdateRequest,
    user_id: CurrentUserId,
    service: WorkflowService,
):
    """Update workflow attributes; stages, when given, replace the stage set."""
    workflow = await service.update_workflow(
        workflow_id, body.to_update(updated_by=user_id)
    )
    return ApprovalWorkflowResponse.model_validate(workflow)


@router.get("/workflows", response_model=list[ApprovalWorkflowResponse])
async def list_active_workflows(
    _: CurrentUserId,
    service: WorkflowService,
    module: str | None = Query(None, max_length=100),
):
    """List active workflows, optionally for one module."""
    workflows = await service.list_active_workflows(module=module)
    return [ApprovalWorkflowResponse.model_validate(w) for w in workflows]


@router.get("/workflows/all", response_model=list[ApprovalWorkflowResponse])
async def list_all_workflows(_: CurrentUserId, service: WorkflowService):
    """List all workflows including inactive ones."""
    workflows = await service.list_all_workflows()
    return [ApprovalWorkflowResponse.model_validate(w) for w in workflows]


@router.get("/workflows/code/{code}", response_model=ApprovalWorkflowResponse)
async def get_workflow_by_code(code: str, _: CurrentUserId, service: WorkflowService):
    """Get a workflow by its unique code."""
    return ApprovalWorkflowResponse.model_validate(
        await service.get_workflow_by_code(code)
    )


@router.get("/workflows/{workflow_id}", response_model=ApprovalWorkflowResponse)
async def get_workflow(workflow_id: str, _: CurrentUserId, service: WorkflowService):
    """Get a workflow by id."""
    return ApprovalWorkflowResponse.model_validate(
        await service.get_workflow_by_id(workflow_id)
    )


# ---- Requests and decisions ----


@router.post("/requests", response_model=ApprovalSubmissionResponse, status_code=201)
async def submit_request(
    body: ApprovalSubmitRequest,
    user_id: CurrentUserId,
    service: RequestService,
):
    """Submit an entity for approval under a workflow."""
    result = await service.submit_request(
        workflow_code=body.workflow_code,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        context=body.context(),
        requested_by=user_id,
    )
    return ApprovalSubmissionResponse.model_validate(result)


@router.post(
    "/executions/{execution_id}/decision",
    response_model=ApprovalDecisionResponse,
)
async def decide_execution(
    execution_id: str,
    body: ApprovalDecisionRequest,
    user_id: CurrentUserId,
    service: RequestService,
):
    """Approve or reject a stage execution as the current user."""
    result = await service.process_approval(
        execution_id=execution_id,
        decision=body.decision,
        reviewed_by=user_id,
        comments=body.comments,
    )
    return ApprovalDecisionResponse.model_validate(result)


@router.get("/requests/{request_id}", response_model=ApprovalRequestDetailsResponse)
async def get_request(request_id: str, _: CurrentUserId, service: RequestService):
    """Get a request with its executions and workflow."""
    return ApprovalRequestDetailsResponse.model_validate(
        await service.get_request_by_id(request_id)
    )


@router.get(
    "/requests/entity/{entity_type}/{entity_id}",
    response_model=ApprovalRequestDetailsResponse,
)
async def get_request_by_entity(
    entity_type: str,
    entity_id: str,
    _: CurrentUserId,
    service: RequestService,
):
    """Get the pending request for an entity; request is null when none is pending."""
    return ApprovalRequestDetailsResponse.model_validate(
        await service.get_request_by_entity(entity_type, entity_id)
    )


# ---- Reviewer queue ----


@router.get("/pending/{approver_id}", response_model=list[PendingApprovalResponse])
async def get_pending_approvals(
    approver_id: str,
    _: CurrentUserId,
    service: RequestService,
):
    """List Pending executions assigned to approver_id."""
    pending = await service.get_pending_approvals(approver_id)
    return [PendingApprovalResponse.model_validate(p) for p in pending]


@router.get("/pending-count", response_model=PendingApprovalsCountResponse)
async def get_pending_approvals_count(user_id: CurrentUserId, service: RequestService):
    """Count Pending executions assigned to the current user."""
    return PendingApprovalsCountResponse.model_validate(
        await service.get_pending_approvals_count(user_id)
    )
