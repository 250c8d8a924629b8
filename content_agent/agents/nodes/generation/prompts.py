from content_agent.agents.state import WorkflowState, SearchResult
from typing import List


def get_content_type_instructions(content_type: str) -> str:
    """Get writing instructions tailored to the detected content type"""
    content_type_instructions = {
        "technical": """
        - Be precise and unambiguous; define terms on first use
        - Use code blocks with a language tag for all code and commands
        - Structure the piece as overview, prerequisites, steps, and troubleshooting
        """,
        "report": """
        - Open with an executive summary of the key findings
        - Support claims with figures and cite their sources
        - Use charts for trends and comparisons
        - Close with conclusions and recommendations
        """,
        "blog": """
        - Use a conversational, engaging tone
        - Start with a hook and use short paragraphs with descriptive subheadings
        - End with a clear takeaway
        """,
        "story": """
        - Build a clear beginning, middle, and end
        - Show character emotions and motivations through action and dialogue
        - Use vivid sensory details
        """,
        "academic": """
        - Use a formal register and precise terminology
        - Structure the text as introduction, discussion, and conclusion
        - Attribute every factual claim with a numbered citation
        """,
        "business": """
        - Be concise and action-oriented
        - Lead with the recommendation, then the supporting rationale
        - Quantify costs, benefits, and risks where possible
        """,
        "general": """
        - Write clearly and organize the piece with headings
        - Adapt the length to the request
        """,
    }
    return content_type_instructions.get(content_type, content_type_instructions["general"])


def build_system_prompt(content_type: str) -> str:
    return f"""You are an expert content writer. Create well-researched, well-structured content that answers the user's request.

Content Type: {content_type}

Writing Guidelines:
{get_content_type_instructions(content_type)}

Formatting:
- Write in Markdown: headings (#), paragraphs, bullet and numbered lists, **bold**, *italic*, `code`, and [links](url)
- When you use web search results, cite them inline as [n] matching their numbers and link the source
- If the content benefits from data visualization (statistics, comparisons, trends), embed a chart
  as a fenced code block tagged `chart` containing JSON, for example:

```chart
{{"type": "bar", "title": "Chart Title", "data": [{{"label": "A", "value": 10}}, {{"label": "B", "value": 20}}], "config": {{"xLabel": "X Axis", "yLabel": "Y Axis"}}}}
```

  Place each chart immediately after the paragraph it illustrates, with a brief explanation before it.
"""


def format_search_results(results: List[SearchResult]) -> str:
    lines = []
    for i, result in enumerate(results, start=1):
        lines.append(f"[{i}] {result['title']}")
        lines.append(f"Source: {result['url']}")
        lines.append(result["snippet"])
        lines.append("")
    return "\n".join(lines).rstrip()


def build_user_prompt(state: WorkflowState) -> str:
    prompt = (state.get("prompt") or "").strip()
    if not prompt:
        return (
            "The user did not provide a request. Do not invent a topic: reply briefly, "
            "asking the user to describe what they would like you to write."
        )

    sections = [f"User Request: {prompt}"]

    results = state.get("search_results") or []
    if results:
        sections.append(
            "Web Search Results (use these for up-to-date facts and cite them):\n"
            + format_search_results(results)
        )

    image_count = sum(1 for item in state.get("user_inputs", []) if item.get("type") == "image")
    if image_count:
        sections.append(
            f"The user attached {image_count} image(s). Reference them where relevant "
            f"using Markdown image syntax: ![description](url)."
        )
        for item in state.get("user_inputs", []):
            if item.get("type") == "image":
                sections.append(f"Image: {item.get('content', '')}")

    return "\n\n".join(sections)


def build_generation_messages(state: WorkflowState) -> List[dict]:
    """Chat messages for the generation provider, as ``{"role", "content"}`` dicts."""
    return [
        {"role": "system", "content": build_system_prompt(state.get("content_type") or "general")},
        {"role": "user", "content": build_user_prompt(state)},
    ]
