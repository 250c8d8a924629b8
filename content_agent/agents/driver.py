"""
Workflow driver: runs and resumes sessions, yielding a state snapshot after
every node.

Snapshots come from ``astream(stream_mode="values")``. Only values whose
node history grew are yielded, so re-emitted input values never show up as
extra snapshots, and every snapshot is a deep copy the caller may keep.
"""

from typing import AsyncIterator, List, Optional
import logging

from langgraph.checkpoint.base import BaseCheckpointSaver

from content_agent.agents.approval import ApprovalGate
from content_agent.agents.errors import WorkflowResumeError
from content_agent.agents.graph import WorkflowOptions, create_content_graph
from content_agent.agents.state import (
    MultimodalInput,
    WorkflowState,
    copy_state,
    create_initial_state,
    is_terminal,
)
from content_agent.constants import STATUS_ERROR, STATUS_WAITING_APPROVAL, SUSPENDED_STATE_KEY
from content_agent.schemas.approval import ApprovalRequest
from content_agent.services.errors import StoreError
from content_agent.services.llm import GenerationProvider
from content_agent.services.search import SearchProvider
from content_agent.services.store import SessionStore

logger = logging.getLogger(__name__)


def _history_length(state: WorkflowState) -> int:
    return len((state.get("metadata") or {}).get("node_history", []))


class WorkflowDriver:

    def __init__(
        self,
        store: SessionStore,
        search_provider: SearchProvider,
        generation_provider: GenerationProvider,
        options: Optional[WorkflowOptions] = None,
        checkpointer: Optional[BaseCheckpointSaver] = None,
    ):
        self.store = store
        self.options = options or WorkflowOptions.from_settings()
        self.approval_gate = ApprovalGate(store)
        self.graph = create_content_graph(
            store,
            search_provider,
            generation_provider,
            options=self.options,
            checkpointer=checkpointer,
        )

    @staticmethod
    def _config(session_id: str) -> dict:
        return {"configurable": {"thread_id": session_id}}

    async def run(
        self,
        session_id: str,
        prompt: str,
        inputs: Optional[List[MultimodalInput]] = None,
        *,
        require_approval: bool = False,
    ) -> AsyncIterator[WorkflowState]:
        """Start a new run for ``session_id`` and yield a snapshot after each node."""
        state = create_initial_state(session_id, prompt, inputs)
        state["requires_approval"] = require_approval or await self._overwrites_content(session_id)

        logger.info(
            f"Session {session_id}: Starting workflow "
            f"(requires_approval={state['requires_approval']})"
        )
        async for snapshot in self._stream(state):
            yield snapshot

    async def load_resumable_state(self, session_id: str) -> Optional[WorkflowState]:
        """Last state of the session, or None when nothing can be resumed.

        The checkpointer is asked first. A session suspended by another
        process (or before a restart) has no local checkpoint, so the
        snapshot stored with the session record at suspension is used.
        """
        snapshot = await self.graph.aget_state(self._config(session_id))
        if snapshot.values:
            return copy_state(snapshot.values)

        record = await self.store.load(session_id)
        if record is None or record.status != STATUS_WAITING_APPROVAL:
            return None
        stored = record.metadata.get(SUSPENDED_STATE_KEY)
        if not stored:
            return None

        logger.info(f"Session {session_id}: No local checkpoint, resuming from the stored snapshot")
        return copy_state(stored)

    async def pending_state(self, approval: ApprovalRequest) -> WorkflowState:
        """The suspended state of ``approval``'s session, if it waits on ``approval``.

        Check this before resolving a request so a decision is never recorded
        for a run that cannot continue.

        Raises:
            WorkflowResumeError: the session cannot be resumed, or it is
                waiting on a different approval request.
        """
        session_id = approval.session_id
        state = await self.load_resumable_state(session_id)
        if state is None:
            raise WorkflowResumeError(f"No suspended state found for session {session_id}")

        pending = state.get("pending_approval") or {}
        if state.get("status") != STATUS_WAITING_APPROVAL or pending.get("id") != approval.id:
            raise WorkflowResumeError(
                f"Session {session_id} is not waiting on approval request {approval.id}"
            )
        return state

    async def resume(self, session_id: str) -> AsyncIterator[WorkflowState]:
        """Continue a session from its last checkpoint.

        A terminal session is yielded once and nothing runs. A session waiting
        for approval is yielded unchanged while the request is pending;
        otherwise the decided state is yielded and the graph continues.

        Raises:
            WorkflowResumeError: no checkpoint or stored snapshot exists for the session.
        """
        state = await self.load_resumable_state(session_id)
        if state is None:
            raise WorkflowResumeError(f"No checkpoint found for session {session_id}")

        if is_terminal(state):
            logger.info(f"Session {session_id}: Already {state['status']}, nothing to resume")
            yield state
            return

        if state.get("status") == STATUS_WAITING_APPROVAL:
            decided = await self.approval_gate.decide(state)
            if decided is None:
                logger.info(f"Session {session_id}: Approval still pending")
                yield state
                return
            state = decided
            yield copy_state(state)

        logger.info(f"Session {session_id}: Resuming workflow at status {state['status']}")
        async for snapshot_state in self._stream(state):
            yield snapshot_state

    async def _stream(self, state: WorkflowState) -> AsyncIterator[WorkflowState]:
        session_id = state["session_id"]
        seen = _history_length(state)
        final = state

        async for values in self.graph.astream(state, self._config(session_id), stream_mode="values"):
            if _history_length(values) <= seen:
                continue
            seen = _history_length(values)
            final = copy_state(values)
            yield final

        await self._record_outcome(final)

    async def _overwrites_content(self, session_id: str) -> bool:
        if not self.options.approval_on_overwrite:
            return False
        try:
            record = await self.store.load(session_id)
        except StoreError as e:
            logger.warning(f"Session {session_id}: Could not check for existing content: {e}")
            return False
        return bool(record and record.content)

    async def _record_outcome(self, state: WorkflowState) -> None:
        """Mirror suspension and failure on the session record (best effort).

        A suspended run also stores its state, so any process sharing the
        store can resume it.
        """
        status = state.get("status")
        if status not in (STATUS_ERROR, STATUS_WAITING_APPROVAL):
            return

        session_id = state["session_id"]
        node_history = list(state["metadata"].get("node_history", []))
        if status == STATUS_ERROR:
            metadata = {"error": state.get("error"), "node_history": node_history}
        else:
            metadata = {"node_history": node_history, SUSPENDED_STATE_KEY: copy_state(state)}
        patch = {"status": status, "metadata": metadata}
        try:
            await self.store.save(session_id, patch)
        except Exception as e:
            logger.error(f"Session {session_id}: Failed to record status {status}: {e}")
