"""
Approval gate: resolves approval requests and turns the decision into the
state a suspended workflow resumes from.
"""

from typing import Optional
import logging

from content_agent.agents.errors import WorkflowResumeError
from content_agent.agents.state import WorkflowState, copy_state, mark_failed
from content_agent.constants import STATUS_GENERATING
from content_agent.schemas.approval import ApprovalRequest, ApprovalStatus
from content_agent.services.store import SessionStore

logger = logging.getLogger(__name__)


class ApprovalGate:

    def __init__(self, store: SessionStore):
        self.store = store

    async def resolve(
        self,
        approval_request_id: str,
        approved: bool,
        response: Optional[str] = None,
    ) -> ApprovalRequest:
        """Record a reviewer's decision.

        Raises:
            ApprovalNotFoundError: unknown request id.
            ApprovalAlreadyResolvedError: the request was already decided.
        """
        status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        request = await self.store.resolve_approval_request(approval_request_id, status, response)
        logger.info(
            f"Session {request.session_id}: Approval request {approval_request_id} "
            f"resolved as {status.value}"
        )
        return request

    async def decide(self, state: WorkflowState) -> Optional[WorkflowState]:
        """State to resume from, or None while the request is still pending.

        Reads the request once; never waits for a decision.
        """
        pending = state.get("pending_approval") or {}
        approval_request_id = pending.get("id")
        if not approval_request_id:
            raise WorkflowResumeError(
                f"Session {state.get('session_id')} is waiting for approval but has no approval request"
            )

        request = await self.store.get_approval_request(approval_request_id)
        if request.status == ApprovalStatus.PENDING:
            return None

        new_state = copy_state(state)
        new_state["metadata"]["approval"] = {
            "id": request.id,
            "kind": request.kind,
            "status": request.status.value,
            "response": request.response,
        }

        if request.status == ApprovalStatus.APPROVED:
            new_state["approval_granted"] = True
            new_state["pending_approval"] = None
            new_state["status"] = STATUS_GENERATING
            return new_state

        message = "Content generation was rejected by the reviewer"
        if request.response:
            message = f"{message}: {request.response}"
        return mark_failed(new_state, message)
