"""Review phase nodes: human-in-the-loop approval."""

from content_agent.agents.nodes.review.await_approval import (
    approval_node,
    choose_approval_kind,
    build_approval_payload,
)

__all__ = [
    "approval_node",
    "choose_approval_kind",
    "build_approval_payload",
]
