"""Tests for the generate node and the generation prompt."""

import pytest

from content_agent.agents.nodes.generation import build_generation_messages, generate_node
from content_agent.agents.state import create_initial_state
from content_agent.services.errors import ProviderError

from conftest import FakeGenerationProvider, make_result


def _generation_state(prompt="What is the current price of Bitcoin?", results=None):
    state = create_initial_state("s-1", prompt)
    state["status"] = "generating"
    state["search_results"] = [r.model_dump() for r in (results or [])]
    state["metadata"]["node_history"] = ["analyze", "search"]
    return state


class TestGenerationMessages:

    def test_every_search_url_is_in_the_prompt(self):
        results = [make_result(i) for i in range(1, 4)]
        messages = build_generation_messages(_generation_state(results=results))

        assert [m["role"] for m in messages] == ["system", "user"]
        user_message = messages[1]["content"]
        assert "User Request: What is the current price of Bitcoin?" in user_message
        for i, result in enumerate(results, start=1):
            assert result.url in user_message
            assert f"[{i}] {result.title}" in user_message

    def test_no_search_section_without_results(self):
        user_message = build_generation_messages(_generation_state())[1]["content"]
        assert "Web Search Results" not in user_message

    def test_empty_prompt_asks_for_clarification(self):
        user_message = build_generation_messages(_generation_state(prompt="  "))[1]["content"]
        assert "asking the user" in user_message
        assert "User Request" not in user_message

    def test_system_prompt_follows_content_type(self):
        state = _generation_state()
        state["content_type"] = "technical"
        system_message = build_generation_messages(state)[0]["content"]
        assert "Content Type: technical" in system_message
        assert "```chart" in system_message

    def test_images_are_mentioned(self):
        state = _generation_state()
        state["user_inputs"] = [{"type": "image", "content": "https://img/cat.png", "metadata": {}}]
        user_message = build_generation_messages(state)[1]["content"]
        assert "1 image(s)" in user_message
        assert "https://img/cat.png" in user_message


class TestGenerateNode:

    async def test_success(self):
        provider = FakeGenerationProvider(content="# Bitcoin\n\nIt is volatile.")
        result = await generate_node(_generation_state(), generation_provider=provider)

        assert result["generated_content"] == "# Bitcoin\n\nIt is volatile."
        assert result["status"] == "formatting"
        assert result["metadata"]["node_history"] == ["analyze", "search", "generate"]
        assert len(provider.calls) == 1

    async def test_provider_error_sets_error_status(self):
        provider = FakeGenerationProvider(error=ProviderError("rate limited"))
        result = await generate_node(_generation_state(), generation_provider=provider)

        assert result["status"] == "error"
        assert "rate limited" in result["error"]
        assert result["generated_content"] is None
        assert result["metadata"]["node_history"][-1] == "generate"
        assert "end_time" in result["metadata"]

    @pytest.mark.parametrize("status", ["completed", "error"])
    async def test_terminal_state_unchanged(self, status):
        state = _generation_state()
        state["status"] = status
        provider = FakeGenerationProvider()
        result = await generate_node(state, generation_provider=provider)
        assert result == state
        assert provider.calls == []
