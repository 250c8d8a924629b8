"""Analysis phase nodes: prompt classification and research decision."""

from content_agent.agents.nodes.analysis.analyze import (
    analyze_node,
    determine_search_need,
    estimate_complexity,
)
from content_agent.agents.nodes.analysis.content_type import detect_content_type

__all__ = [
    "analyze_node",
    "determine_search_need",
    "estimate_complexity",
    "detect_content_type",
]
