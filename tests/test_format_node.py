"""Tests for Markdown formatting into the structured document."""

from content_agent.agents.nodes.generation import format_node, markdown_to_document, parse_inline
from content_agent.agents.state import create_initial_state


def _block_types(document):
    return [block.type for block in document.content]


class TestParseInline:

    def test_plain_text(self):
        nodes = parse_inline("just text")
        assert len(nodes) == 1
        assert nodes[0].text == "just text"
        assert nodes[0].marks == []

    def test_marks(self):
        nodes = parse_inline("a **bold** and *italic* with `code` and [a link](https://x.io)")
        marked = [(n.text, [m.type for m in n.marks]) for n in nodes if n.marks]
        assert marked == [
            ("bold", ["bold"]),
            ("italic", ["italic"]),
            ("code", ["code"]),
            ("a link", ["link"]),
        ]
        link = [n for n in nodes if n.marks and n.marks[0].type == "link"][0]
        assert link.marks[0].href == "https://x.io"

    def test_snake_case_is_not_italic(self):
        nodes = parse_inline("call snake_case_name here")
        assert all(not n.marks for n in nodes)


class TestMarkdownToDocument:

    def test_block_structure(self):
        markdown = "\n".join([
            "# Title",
            "",
            "First paragraph",
            "continues here.",
            "",
            "- one",
            "- two",
            "",
            "3. third",
            "4. fourth",
            "",
            "---",
            "",
            "```python",
            "print('hi')",
            "```",
        ])
        document, charts = markdown_to_document(markdown)

        assert _block_types(document) == [
            "heading", "paragraph", "bullet_list", "ordered_list", "horizontal_rule", "code_block",
        ]
        heading, paragraph, bullets, ordered, _, code = document.content
        assert heading.level == 1
        assert paragraph.content[0].text == "First paragraph continues here."
        assert [item.content[0].text for item in bullets.items] == ["one", "two"]
        assert ordered.start == 3
        assert code.language == "python"
        assert code.code == "print('hi')"
        assert charts == []

    def test_fenced_chart(self):
        markdown = "\n".join([
            "Sales grew.",
            "",
            "```chart",
            '{"type": "line", "title": "Sales", "data": [{"label": "Q1", "value": 3}]}',
            "```",
        ])
        document, charts = markdown_to_document(markdown)

        assert _block_types(document) == ["paragraph", "chart"]
        assert charts == [{
            "id": "chart-1",
            "chart_type": "line",
            "data": [{"label": "Q1", "value": 3}],
            "config": {"title": "Sales"},
            "position": 1,
        }]
        assert document.content[1].chart_id == "chart-1"

    def test_graph_div(self):
        markdown = (
            "<div data-type=\"graph\" data-id=\"g1\" "
            "data-graph-data='[{\"label\":\"A\",\"value\":10}]' "
            "data-config='{\"title\":\"T\"}'></div>"
        )
        document, charts = markdown_to_document(markdown)
        assert _block_types(document) == ["chart"]
        assert charts[0]["id"] == "g1"
        assert charts[0]["data"] == [{"label": "A", "value": 10}]
        assert charts[0]["config"] == {"title": "T"}

    def test_invalid_chart_json_kept_as_code(self):
        document, charts = markdown_to_document("```chart\n{not json\n```")
        assert charts == []
        assert _block_types(document) == ["code_block"]
        assert document.content[0].language == "chart"

    def test_images_become_blocks(self):
        document, _ = markdown_to_document("Look: ![a cat](https://img/cat.png) cute")
        assert _block_types(document) == ["paragraph", "image", "paragraph"]
        assert document.content[1].src == "https://img/cat.png"
        assert document.content[1].alt == "a cat"

    def test_unterminated_code_block(self):
        document, _ = markdown_to_document("```\nline one\nline two")
        assert _block_types(document) == ["code_block"]
        assert document.content[0].code == "line one\nline two"

    def test_empty_text(self):
        document, charts = markdown_to_document("")
        assert document.content == []
        assert charts == []


class TestFormatNode:

    def test_formats_and_keeps_generated_content(self):
        state = create_initial_state("s-1", "Write about autumn")
        state["status"] = "formatting"
        state["generated_content"] = "# Autumn\n\nLeaves fall."
        state["metadata"]["node_history"] = ["analyze", "generate"]

        result = format_node(state)

        assert result["status"] == "saving"
        assert result["generated_content"] == "# Autumn\n\nLeaves fall."
        assert result["formatted_content"]["type"] == "doc"
        assert [b["type"] for b in result["formatted_content"]["content"]] == ["heading", "paragraph"]
        assert result["metadata"]["node_history"] == ["analyze", "generate", "format"]

    def test_terminal_state_unchanged(self):
        state = create_initial_state("s-1", "x")
        state["status"] = "completed"
        assert format_node(state) == state
