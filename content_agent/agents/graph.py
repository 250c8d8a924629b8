"""
LangGraph workflow for content generation with optional human approval.

Routing is table-driven: after START and after every node, ``route_by_status``
picks the next node from the state's ``status``. ``analyze`` and ``search``
report their own phase (``analyzing``, ``searching``) and the router reads
``needs_search`` and ``requires_approval`` to choose what follows; later nodes
set the status of the phase that comes next. Because START routes the same
way, a checkpointed state can be fed back in with any non-terminal status and
the graph picks up at the matching node; this is how approval resumes work.

Graph shape:

    START
      │
    analyze ──► search ──┐
      │                  ▼
      └──────────► [approval] ──► END (waiting_approval; driver resumes)
                         │
                      generate ──► format ──► save ──► END
                         │           │         │
                         └───────────┴─────────┴──► END (error)
"""

from typing import Optional

import aiosqlite
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver
from langgraph.checkpoint.sqlite.aio import AsyncSqliteSaver
from langgraph.graph import StateGraph, START, END
from pydantic import BaseModel

from content_agent.agents.errors import WorkflowDefectError
from content_agent.agents.nodes import (
    analyze_node,
    search_node,
    approval_node,
    generate_node,
    format_node,
    save_node,
)
from content_agent.agents.state import WorkflowState
from content_agent.config import settings
from content_agent.constants import (
    DEFAULT_MAX_SEARCH_RESULTS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    NODE_ANALYZE,
    NODE_APPROVAL,
    NODE_FORMAT,
    NODE_GENERATE,
    NODE_SAVE,
    NODE_SEARCH,
    STATUS_ANALYZING,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_FORMATTING,
    STATUS_GENERATING,
    STATUS_IDLE,
    STATUS_SAVING,
    STATUS_SEARCHING,
    STATUS_WAITING_APPROVAL,
)
from content_agent.services.llm import GenerationProvider
from content_agent.services.search import SearchProvider
from content_agent.services.store import SessionStore
import logging

logger = logging.getLogger(__name__)


class WorkflowOptions(BaseModel):
    max_search_results: int = DEFAULT_MAX_SEARCH_RESULTS
    model: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    approval_on_overwrite: bool = True

    @classmethod
    def from_settings(cls) -> "WorkflowOptions":
        return cls(
            max_search_results=settings.max_search_results,
            model=settings.generation_model or None,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
            approval_on_overwrite=settings.approval_on_overwrite,
        )


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

# status -> node that runs next. ``analyzing`` and ``searching`` are reported
# by the node that just finished that phase; ``generating`` goes through
# _generation_step, which inserts the approval node when one is required.
STATUS_ROUTES = {
    STATUS_IDLE: NODE_ANALYZE,
    STATUS_FORMATTING: NODE_FORMAT,
    STATUS_SAVING: NODE_SAVE,
    STATUS_WAITING_APPROVAL: END,
    STATUS_COMPLETED: END,
    STATUS_ERROR: END,
}

ROUTE_TARGETS = [NODE_ANALYZE, NODE_SEARCH, NODE_APPROVAL, NODE_GENERATE, NODE_FORMAT, NODE_SAVE, END]


def _generation_step(state: WorkflowState) -> str:
    if state.get("requires_approval") and not state.get("approval_granted"):
        return NODE_APPROVAL
    return NODE_GENERATE


def route_by_status(state: WorkflowState) -> str:
    """Pick the next node from the state's status.

    Raises:
        WorkflowDefectError: the status has no entry in the transition table.
    """
    status = state.get("status")

    if status == STATUS_ANALYZING:
        return NODE_SEARCH if state.get("needs_search") is True else _generation_step(state)
    if status in (STATUS_SEARCHING, STATUS_GENERATING):
        return _generation_step(state)

    if status not in STATUS_ROUTES:
        logger.critical(
            f"Session {state.get('session_id', 'unknown')}: No transition for status {status!r}"
        )
        raise WorkflowDefectError(f"No transition defined for workflow status {status!r}")

    return STATUS_ROUTES[status]


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------

def get_checkpointer(path: Optional[str] = None) -> BaseCheckpointSaver:
    """
    Create an AsyncSqliteSaver when a checkpoint file is configured so
    suspended sessions survive restarts. Falls back to MemorySaver.

    Must be called from inside a running event loop when a path is set.
    """
    path = settings.checkpointer_path if path is None else path

    if path:
        try:
            checkpointer = AsyncSqliteSaver(aiosqlite.connect(path))
            logger.info(f"Using AsyncSqliteSaver checkpointer at {path}")
            return checkpointer
        except Exception as e:
            logger.warning(
                f"Failed to create AsyncSqliteSaver checkpointer: {e}. "
                f"Falling back to MemorySaver (not suitable for production)."
            )

    return MemorySaver()


def create_content_graph(
    store: SessionStore,
    search_provider: SearchProvider,
    generation_provider: GenerationProvider,
    options: Optional[WorkflowOptions] = None,
    checkpointer: Optional[BaseCheckpointSaver] = None,
):
    """Build and compile the workflow graph with its dependencies bound."""
    options = options or WorkflowOptions()

    # ── Dependency-bound async nodes ──
    async def search(state: WorkflowState) -> WorkflowState:
        return await search_node(
            state, search_provider=search_provider, max_results=options.max_search_results
        )

    async def approval(state: WorkflowState) -> WorkflowState:
        return await approval_node(state, store=store)

    async def generate(state: WorkflowState) -> WorkflowState:
        return await generate_node(
            state,
            generation_provider=generation_provider,
            model=options.model,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
        )

    async def save(state: WorkflowState) -> WorkflowState:
        return await save_node(state, store=store)

    workflow = StateGraph(WorkflowState)

    workflow.add_node(NODE_ANALYZE, analyze_node)
    workflow.add_node(NODE_SEARCH, search)
    workflow.add_node(NODE_APPROVAL, approval)
    workflow.add_node(NODE_GENERATE, generate)
    workflow.add_node(NODE_FORMAT, format_node)
    workflow.add_node(NODE_SAVE, save)

    # Every hop, including the entry, goes through the transition table
    workflow.add_conditional_edges(START, route_by_status, ROUTE_TARGETS)
    for node in (NODE_ANALYZE, NODE_SEARCH, NODE_APPROVAL, NODE_GENERATE, NODE_FORMAT, NODE_SAVE):
        workflow.add_conditional_edges(node, route_by_status, ROUTE_TARGETS)

    return workflow.compile(checkpointer=checkpointer if checkpointer is not None else MemorySaver())
