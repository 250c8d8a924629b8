"""
Web research for prompts that need real-time data.

Search is best-effort: any provider failure degrades to an empty result
list and the workflow moves on to generation. The node reports
``searching`` whether or not the provider was called; routing reads
``requires_approval`` to pick the next node. The failure is recorded in
``metadata.search_error`` only, never in ``error``.
"""

from content_agent.agents.state import WorkflowState, SearchResult, copy_state, enter_node, is_terminal
from content_agent.constants import (
    DEFAULT_MAX_SEARCH_RESULTS,
    MAX_SEARCH_QUERIES,
    MIN_QUERY_SENTENCE_LENGTH,
    NODE_SEARCH,
    STATUS_SEARCHING,
)
from content_agent.services.search import SearchProvider
from typing import List
import logging
import re

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def build_search_queries(prompt: str) -> List[str]:
    """The full prompt first, then its longer sentences, up to MAX_SEARCH_QUERIES."""
    prompt = prompt.strip()
    if not prompt:
        return []

    queries = [prompt]
    whole = prompt.rstrip(".!?").strip()
    for sentence in _SENTENCE_SPLIT_RE.split(prompt):
        if len(queries) >= MAX_SEARCH_QUERIES:
            break
        sentence = sentence.strip()
        if len(sentence) > MIN_QUERY_SENTENCE_LENGTH and sentence != whole and sentence not in queries:
            queries.append(sentence)
    return queries


def merge_results(results: List[SearchResult], max_results: int) -> List[SearchResult]:
    """Drop duplicates (by URL) and results with no title or snippet."""
    merged: List[SearchResult] = []
    seen_urls = set()
    for result in results:
        url = result.get("url")
        if not url or url in seen_urls:
            continue
        if not result.get("title") or not result.get("snippet"):
            continue
        seen_urls.add(url)
        merged.append(result)
        if len(merged) >= max_results:
            break
    return merged


async def search_node(
    state: WorkflowState,
    *,
    search_provider: SearchProvider,
    max_results: int = DEFAULT_MAX_SEARCH_RESULTS,
) -> WorkflowState:
    if is_terminal(state):
        return copy_state(state)

    session_id = state.get("session_id", "unknown")
    new_state = enter_node(state, NODE_SEARCH)
    new_state["status"] = STATUS_SEARCHING

    if new_state.get("needs_search") is not True:
        logger.info(f"Session {session_id}: Search not needed, skipping provider call")
        new_state["search_results"] = []
        return new_state

    queries = build_search_queries(new_state.get("prompt", ""))
    new_state["metadata"]["search_queries"] = queries

    collected: List[SearchResult] = []
    failures: List[str] = []
    for query in queries:
        try:
            results = await search_provider.search(query, max_results=max_results)
            collected.extend(result.model_dump() for result in results)
        except Exception as e:
            logger.warning(f"Session {session_id}: Search failed for query '{query}': {e}")
            failures.append(str(e))

    new_state["search_results"] = merge_results(collected, max_results)

    if failures and len(failures) == len(queries):
        new_state["metadata"]["search_error"] = failures[0]
        logger.warning(f"Session {session_id}: All searches failed, continuing without results")
    else:
        logger.info(
            f"Session {session_id}: Search returned {len(new_state['search_results'])} results "
            f"from {len(queries)} queries"
        )

    return new_state
