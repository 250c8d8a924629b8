"""Persistence phase nodes."""

from content_agent.agents.nodes.persistence.save import save_node

__all__ = [
    "save_node",
]
