"""
Workflow nodes grouped by phase.

Every node takes the full state and returns a complete new state. Nodes
that need a provider or the store take it as a keyword argument; the graph
builder binds those dependencies.
"""

from content_agent.agents.nodes.analysis import analyze_node
from content_agent.agents.nodes.research import search_node
from content_agent.agents.nodes.review import approval_node
from content_agent.agents.nodes.generation import generate_node, format_node
from content_agent.agents.nodes.persistence import save_node

__all__ = [
    # Analysis phase
    "analyze_node",
    # Research phase
    "search_node",
    # Review phase
    "approval_node",
    # Generation phase
    "generate_node",
    "format_node",
    # Persistence phase
    "save_node",
]
