"""
Approval node: pause the workflow for a human decision.

The node files an approval request with the session store and moves the
workflow to ``waiting_approval``, which ends the current graph run. The
driver resumes the session once the request is resolved; the node itself
never blocks or polls.
"""

from content_agent.agents.state import WorkflowState, copy_state, enter_node, is_terminal, mark_failed
from content_agent.constants import (
    APPROVAL_GENERATE_CONTENT,
    APPROVAL_OVERWRITE_CONTENT,
    APPROVAL_USE_SEARCH_RESULTS,
    NODE_APPROVAL,
    STATUS_WAITING_APPROVAL,
)
from content_agent.schemas.session import SessionRecord
from content_agent.services.store import SessionStore
from typing import Optional
import logging

logger = logging.getLogger(__name__)

CONTENT_PREVIEW_CHARS = 500


def choose_approval_kind(state: WorkflowState, record: Optional[SessionRecord]) -> str:
    if record is not None and record.content:
        return APPROVAL_OVERWRITE_CONTENT
    if state.get("search_results"):
        return APPROVAL_USE_SEARCH_RESULTS
    return APPROVAL_GENERATE_CONTENT


def build_approval_payload(state: WorkflowState, kind: str, record: Optional[SessionRecord]) -> dict:
    """What the reviewer sees when deciding."""
    payload = {
        "prompt": state.get("prompt", ""),
        "content_type": state.get("content_type"),
        "search_results": [
            {"title": r["title"], "url": r["url"], "source": r["source"]}
            for r in state.get("search_results", [])
        ],
    }
    if kind == APPROVAL_OVERWRITE_CONTENT and record is not None:
        payload["existing_content_preview"] = (record.content or "")[:CONTENT_PREVIEW_CHARS]
    return payload


async def approval_node(state: WorkflowState, *, store: SessionStore) -> WorkflowState:
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_APPROVAL)

    try:
        record = await store.load(session_id)
        kind = choose_approval_kind(new_state, record)
        request = await store.create_approval_request(
            session_id, kind, build_approval_payload(new_state, kind, record)
        )
    except Exception as e:
        logger.error(f"Session {session_id}: Failed to create approval request: {e}")
        return mark_failed(new_state, f"Failed to create approval request: {e}")

    new_state["pending_approval"] = request.model_dump(mode="json")
    new_state["status"] = STATUS_WAITING_APPROVAL

    logger.info(
        f"Session {session_id}: Waiting for approval (request {request.id}, kind={kind})"
    )
    return new_state
