from typing import TypedDict, List, Optional, Literal, Any
import copy
import time

from content_agent.constants import (
    DEFAULT_CONTENT_TYPE,
    STATUS_ERROR,
    STATUS_IDLE,
    TERMINAL_STATUSES,
)

WorkflowStatus = Literal[
    "idle",
    "analyzing",
    "searching",
    "waiting_approval",
    "generating",
    "formatting",
    "saving",
    "completed",
    "error",
]


class MultimodalInput(TypedDict, total=False):
    type: Literal["text", "image"]
    content: str                    # text body, or an image URL / data URI
    metadata: dict


class SearchResult(TypedDict):
    title: str
    url: str
    snippet: str
    source: str


class ChartData(TypedDict):
    id: str
    chart_type: str
    data: Any
    config: dict
    position: int                   # index of the chart block in formatted_content


class WorkflowMetadata(TypedDict, total=False):
    start_time: float
    end_time: Optional[float]
    node_history: List[str]         # append-only, one entry per node execution

    # Diagnostics written by individual nodes
    content_type_detection: dict
    content_requirements: dict
    search_queries: List[str]
    search_error: Optional[str]
    approval: dict


class WorkflowState(TypedDict):
    """State for the content generation workflow.

    Every node receives the full state and returns a complete new state, so
    no channel uses a reducer. Values are plain JSON types (pydantic models
    are dumped before they enter the state) to keep checkpoints serializable.

    ``status`` names the phase the workflow is in *next*; the graph routes on
    it after every node.
    """

    session_id: str
    prompt: str
    user_inputs: List[MultimodalInput]
    content_type: str

    status: WorkflowStatus
    needs_search: Optional[bool]

    # ── Human-in-the-loop ──
    requires_approval: bool
    approval_granted: bool
    pending_approval: Optional[dict]  # serialized ApprovalRequest while waiting

    # ── Research ──
    search_results: List[SearchResult]

    # ── Generation outputs ──
    generated_content: Optional[str]
    formatted_content: Optional[dict]
    charts: List[ChartData]

    # Error handling
    error: Optional[str]

    metadata: WorkflowMetadata


def create_initial_state(
    session_id: str,
    prompt: str,
    user_inputs: Optional[List[MultimodalInput]] = None,
) -> WorkflowState:
    """Build the state a new workflow run starts from."""
    return {
        "session_id": session_id,
        "prompt": prompt,
        "user_inputs": [dict(item) for item in (user_inputs or [])],
        "content_type": DEFAULT_CONTENT_TYPE,
        "status": STATUS_IDLE,
        "needs_search": None,
        "requires_approval": False,
        "approval_granted": False,
        "pending_approval": None,
        "search_results": [],
        "generated_content": None,
        "formatted_content": None,
        "charts": [],
        "error": None,
        "metadata": {
            "start_time": time.time(),
            "node_history": [],
        },
    }


def copy_state(state: WorkflowState) -> WorkflowState:
    return copy.deepcopy(state)


def is_terminal(state: WorkflowState) -> bool:
    return state.get("status") in TERMINAL_STATUSES


def enter_node(state: WorkflowState, node_name: str) -> WorkflowState:
    """Copy the state and record ``node_name`` in the node history."""
    new_state = copy_state(state)
    metadata = new_state.setdefault("metadata", {})
    metadata["node_history"] = list(metadata.get("node_history", [])) + [node_name]
    return new_state


def mark_failed(state: WorkflowState, message: str) -> WorkflowState:
    """Move ``state`` (already copied by the caller) to the terminal error status."""
    state["status"] = STATUS_ERROR
    state["error"] = message
    state["pending_approval"] = None
    state["metadata"]["end_time"] = time.time()
    return state
