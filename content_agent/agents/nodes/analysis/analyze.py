from content_agent.agents.nodes.analysis.content_type import detect_content_type
from content_agent.agents.state import WorkflowState, MultimodalInput, copy_state, enter_node, is_terminal
from content_agent.constants import (
    MEDIUM_PROMPT_MAX_WORDS,
    NODE_ANALYZE,
    QUESTION_WORDS,
    SEARCH_INDICATORS,
    SIMPLE_PROMPT_MAX_WORDS,
    STATUS_ANALYZING,
)
from typing import List
import logging
import re

logger = logging.getLogger(__name__)

# Whole-word matching so that e.g. "generate" does not count as "rate"
_INDICATOR_RE = re.compile(
    r"\b(" + "|".join(re.escape(indicator) for indicator in SEARCH_INDICATORS) + r")\b"
)
_QUESTION_START_RE = re.compile(r"^\s*(" + "|".join(QUESTION_WORDS) + r")\b", re.IGNORECASE)


def determine_search_need(prompt: str) -> bool:
    """Decide whether the prompt asks for real-time or factual data."""
    if not prompt or not prompt.strip():
        return False

    if _INDICATOR_RE.search(prompt.lower()):
        return True

    # A question is likely to need facts the model may not have
    return "?" in prompt or bool(_QUESTION_START_RE.match(prompt))


def estimate_complexity(prompt: str) -> str:
    word_count = len(prompt.split())
    if word_count < SIMPLE_PROMPT_MAX_WORDS:
        return "simple"
    if word_count < MEDIUM_PROMPT_MAX_WORDS:
        return "medium"
    return "complex"


def extract_content_requirements(prompt: str, user_inputs: List[MultimodalInput]) -> dict:
    image_count = sum(1 for item in user_inputs if item.get("type") == "image")
    return {
        "has_text_input": bool(prompt.strip()),
        "has_image_input": image_count > 0,
        "image_count": image_count,
        "prompt_length": len(prompt),
        "estimated_complexity": estimate_complexity(prompt),
    }


def analyze_node(state: WorkflowState) -> WorkflowState:
    """Classify the prompt and decide whether web research is needed."""
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_ANALYZE)
    prompt = new_state.get("prompt", "")

    detection = detect_content_type(prompt)
    needs_search = determine_search_need(prompt)

    new_state["content_type"] = detection["type"]
    new_state["needs_search"] = needs_search
    new_state["metadata"]["content_type_detection"] = detection
    new_state["metadata"]["content_requirements"] = extract_content_requirements(
        prompt, new_state.get("user_inputs", [])
    )
    new_state["status"] = STATUS_ANALYZING

    logger.info(
        f"Session {session_id}: Analyzed prompt: content_type={detection['type']} "
        f"(confidence {detection['confidence']:.2f}), needs_search={needs_search}"
    )
    return new_state
