"""Generation phase nodes: content writing and formatting."""

from content_agent.agents.nodes.generation.generate import generate_node
from content_agent.agents.nodes.generation.format_content import format_node
from content_agent.agents.nodes.generation.markdown import (
    MarkdownFormatter,
    markdown_to_document,
    parse_inline,
)
from content_agent.agents.nodes.generation.prompts import build_generation_messages

__all__ = [
    "generate_node",
    "format_node",
    "MarkdownFormatter",
    "markdown_to_document",
    "parse_inline",
    "build_generation_messages",
]
