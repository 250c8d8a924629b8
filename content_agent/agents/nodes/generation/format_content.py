from content_agent.agents.nodes.generation.markdown import markdown_to_document
from content_agent.agents.state import WorkflowState, copy_state, enter_node, is_terminal, mark_failed
from content_agent.constants import NODE_FORMAT, STATUS_SAVING
import logging

logger = logging.getLogger(__name__)


def format_node(state: WorkflowState) -> WorkflowState:
    """Convert the generated Markdown into the structured document and extract charts.

    ``generated_content`` is left untouched; the document is stored in
    ``formatted_content`` as plain JSON.
    """
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_FORMAT)

    try:
        document, charts = markdown_to_document(new_state.get("generated_content") or "")
    except Exception as e:
        logger.error(f"Session {session_id}: Failed to format content: {e}")
        return mark_failed(new_state, f"Failed to format content: {e}")

    new_state["formatted_content"] = document.model_dump(mode="json")
    new_state["charts"] = charts
    new_state["status"] = STATUS_SAVING

    logger.info(
        f"Session {session_id}: Formatted content into {len(document.content)} blocks "
        f"with {len(charts)} charts"
    )
    return new_state
