from content_agent.agents.nodes.generation.prompts import build_generation_messages
from content_agent.agents.state import WorkflowState, copy_state, enter_node, is_terminal, mark_failed
from content_agent.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    NODE_GENERATE,
    STATUS_FORMATTING,
)
from content_agent.services.llm import GenerationProvider
from typing import Optional
import logging

logger = logging.getLogger(__name__)


async def generate_node(
    state: WorkflowState,
    *,
    generation_provider: GenerationProvider,
    model: Optional[str] = None,
    temperature: float = DEFAULT_TEMPERATURE,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> WorkflowState:
    """Generate the content text from the prompt and any search results"""
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_GENERATE)
    messages = build_generation_messages(new_state)

    logger.info(
        f"Session {session_id}: Generating {new_state.get('content_type')} content "
        f"with {len(new_state.get('search_results', []))} search results"
    )

    try:
        content = await generation_provider.generate(
            messages, model=model, temperature=temperature, max_tokens=max_tokens
        )
    except Exception as e:
        logger.error(f"Session {session_id}: Content generation failed: {e}")
        new_state["generated_content"] = None
        return mark_failed(new_state, f"Content generation failed: {e}")

    new_state["generated_content"] = content
    new_state["status"] = STATUS_FORMATTING
    return new_state
