"""
Agent API endpoints.

Provides:
- POST /agent/generate  Start a workflow run (NDJSON stream)
- POST /agent/approve  Resolve an approval request and resume (NDJSON stream)
- GET  /agent/sessions/{session_id}  Session record
- GET  /agent/sessions/{session_id}/approvals  Approval requests filed for a session
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import StreamingResponse
from typing import List
import logging
import uuid

from content_agent.agents.driver import WorkflowDriver
from content_agent.agents.errors import WorkflowResumeError
from content_agent.api.deps import get_driver, get_store
from content_agent.api.events import stream_workflow_events
from content_agent.config import settings, limiter
from content_agent.constants import (
    DEFAULT_SESSION_TITLE,
    NDJSON_MEDIA_TYPE,
    SESSION_TITLE_MAX_CHARS,
    STATUS_ANALYZING,
    STATUS_ERROR,
    STATUS_GENERATING,
)
from content_agent.schemas.agent import GenerateRequest
from content_agent.schemas.approval import ApprovalRequest, ApprovalStatus, ApproveRequest
from content_agent.schemas.session import SessionRecord
from content_agent.services.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    StoreError,
)
from content_agent.services.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agent", tags=["agent"])

STREAM_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


def title_from_prompt(prompt: str) -> str:
    title = " ".join(prompt.split())
    if len(title) > SESSION_TITLE_MAX_CHARS:
        title = title[:SESSION_TITLE_MAX_CHARS - 3].rstrip() + "..."
    return title or DEFAULT_SESSION_TITLE


@router.post("/generate")
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def generate_content(
    request: Request,
    generate_request: GenerateRequest,
    driver: WorkflowDriver = Depends(get_driver),
    store: SessionStore = Depends(get_store),
):
    """
    Start content generation and stream workflow progress as NDJSON.
    Creates the session if ``session_id`` is not given.
    """
    prompt = generate_request.prompt.strip()
    if not prompt:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prompt cannot be empty",
        )

    session_id = generate_request.session_id or str(uuid.uuid4())

    try:
        existing = await store.load(session_id)
        patch = {"prompt": prompt, "status": STATUS_ANALYZING}
        if generate_request.title or existing is None or not existing.title:
            patch["title"] = generate_request.title or title_from_prompt(prompt)
        await store.save(session_id, patch)
    except StoreError as e:
        logger.error(f"Session {session_id}: Failed to create session: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create content session",
        )

    snapshots = driver.run(
        session_id,
        prompt,
        [item.model_dump() for item in generate_request.user_inputs],
        require_approval=generate_request.require_approval,
    )
    return StreamingResponse(
        stream_workflow_events(session_id, snapshots, initial_status=STATUS_ANALYZING),
        media_type=NDJSON_MEDIA_TYPE,
        headers={**STREAM_HEADERS, "X-Session-Id": session_id},
    )


@router.post("/approve")
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def approve_request(
    request: Request,
    approve: ApproveRequest,
    driver: WorkflowDriver = Depends(get_driver),
    store: SessionStore = Depends(get_store),
):
    """
    Approve or reject a pending request, then stream the resumed workflow.
    The decision is only recorded once the session is known to be waiting on this request.
    """
    try:
        approval = await store.get_approval_request(approve.approval_request_id)
    except ApprovalNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Approval request not found",
        )
    if approval.status != ApprovalStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Approval request {approval.id} is already {approval.status.value}",
        )

    try:
        await driver.pending_state(approval)
    except WorkflowResumeError as e:
        logger.warning(f"Session {approval.session_id}: Cannot resume for approval {approval.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    try:
        approval = await driver.approval_gate.resolve(
            approve.approval_request_id, approve.approved, approve.response
        )
    except ApprovalAlreadyResolvedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    initial_status = STATUS_GENERATING if approve.approved else STATUS_ERROR
    return StreamingResponse(
        stream_workflow_events(
            approval.session_id,
            driver.resume(approval.session_id),
            initial_status=initial_status,
        ),
        media_type=NDJSON_MEDIA_TYPE,
        headers={**STREAM_HEADERS, "X-Session-Id": approval.session_id},
    )


@router.get("/sessions/{session_id}", response_model=SessionRecord)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_store),
):
    """Get a content session"""
    record = await store.load(session_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return record


@router.get("/sessions/{session_id}/approvals", response_model=List[ApprovalRequest])
async def list_session_approvals(
    session_id: str,
    store: SessionStore = Depends(get_store),
):
    """List approval requests filed for a session, oldest first"""
    if await store.load(session_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return await store.list_approval_requests(session_id)
