from content_agent.agents.state import WorkflowState, copy_state, enter_node, is_terminal, mark_failed
from content_agent.constants import NODE_SAVE, STATUS_COMPLETED
from content_agent.services.store import SessionStore
import logging
import time

logger = logging.getLogger(__name__)


async def save_node(state: WorkflowState, *, store: SessionStore) -> WorkflowState:
    """Persist the generated content and charts to the session store."""
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_SAVE)
    new_state["metadata"]["end_time"] = time.time()

    patch = {
        "content": new_state.get("generated_content"),
        "formatted_content": new_state.get("formatted_content"),
        "charts": new_state.get("charts", []),
        "status": STATUS_COMPLETED,
        "metadata": {
            "content_type": new_state.get("content_type"),
            "node_history": list(new_state["metadata"].get("node_history", [])),
            "start_time": new_state["metadata"].get("start_time"),
            "end_time": new_state["metadata"]["end_time"],
            "search_results": new_state.get("search_results", []),
        },
    }

    try:
        await store.save(session_id, patch)
    except Exception as e:
        # generated_content stays in the state so the caller can still use it
        logger.error(f"Session {session_id}: Failed to save content: {e}")
        return mark_failed(new_state, f"Failed to save content: {e}")

    new_state["status"] = STATUS_COMPLETED
    logger.info(f"Session {session_id}: Content saved, workflow completed")
    return new_state
