"""Research phase nodes: web search."""

from content_agent.agents.nodes.research.search import (
    search_node,
    build_search_queries,
    merge_results,
)

__all__ = [
    "search_node",
    "build_search_queries",
    "merge_results",
]
