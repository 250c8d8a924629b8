"""
Stream framing for workflow runs: one JSON object per line (NDJSON).

Event sequence for a run:

    connected -> status (initial) -> state (one per snapshot) -> terminal

where the terminal event is ``complete`` for a finished run, ``status`` with
``waiting_approval`` (plus the approval request) for a suspended one, or
``status`` with ``error`` for a domain failure. An ``error`` event is only
sent when the stream itself raised.
"""

from typing import AsyncIterator, Optional
import json
import logging

from content_agent.agents.state import WorkflowState
from content_agent.constants import (
    EVENT_COMPLETE,
    EVENT_CONNECTED,
    EVENT_ERROR,
    EVENT_STATE,
    EVENT_STATUS,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_WAITING_APPROVAL,
)

logger = logging.getLogger(__name__)


def encode_event(event_type: str, **fields) -> str:
    return json.dumps({"type": event_type, **fields}, default=str) + "\n"


def terminal_event(session_id: str, state: WorkflowState) -> Optional[str]:
    status = state.get("status")
    if status == STATUS_COMPLETED:
        return encode_event(
            EVENT_COMPLETE,
            session_id=session_id,
            content=state.get("generated_content"),
            formatted_content=state.get("formatted_content"),
            charts=state.get("charts", []),
        )
    if status == STATUS_WAITING_APPROVAL:
        return encode_event(
            EVENT_STATUS,
            session_id=session_id,
            status=status,
            approval_request=state.get("pending_approval"),
        )
    if status == STATUS_ERROR:
        return encode_event(EVENT_STATUS, session_id=session_id, status=status, error=state.get("error"))
    return None


async def stream_workflow_events(
    session_id: str,
    snapshots: AsyncIterator[WorkflowState],
    *,
    initial_status: str,
) -> AsyncIterator[str]:
    yield encode_event(EVENT_CONNECTED, session_id=session_id)
    yield encode_event(EVENT_STATUS, session_id=session_id, status=initial_status)

    final: Optional[WorkflowState] = None
    try:
        async for snapshot in snapshots:
            final = snapshot
            yield encode_event(EVENT_STATE, session_id=session_id, state=snapshot)
    except Exception as e:
        # The response has already started; report the failure in-band
        logger.exception(f"Session {session_id}: Workflow stream failed: {e}")
        yield encode_event(EVENT_ERROR, session_id=session_id, error=str(e))
        return

    if final is not None:
        event = terminal_event(session_id, final)
        if event is not None:
            yield event
