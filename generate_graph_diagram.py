"""
Script to generate a diagram of the LangGraph workflow structure.

Builds the compiled graph with placeholder providers and writes it as a
Mermaid flowchart (``workflow_graph.mmd`` by default).
"""

import sys

from content_agent.agents.graph import create_content_graph
from content_agent.services.llm import LangChainGenerationProvider
from content_agent.services.search import TavilySearchProvider
from content_agent.services.store import InMemorySessionStore


def create_graph_diagram(output_path: str = "workflow_graph.mmd") -> str:
    """Write the workflow graph as Mermaid and return the diagram source."""
    graph = create_content_graph(
        store=InMemorySessionStore(),
        search_provider=TavilySearchProvider(api_key=""),
        generation_provider=LangChainGenerationProvider(),
    )
    mermaid = graph.get_graph().draw_mermaid()

    with open(output_path, "w") as f:
        f.write(mermaid)

    return mermaid


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else "workflow_graph.mmd"
    create_graph_diagram(path)
    print(f"Graph diagram created: {path}")
