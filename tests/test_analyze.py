"""Tests for the analyze node, search heuristics and content-type detection."""

import pytest

from content_agent.agents.nodes.analysis import (
    analyze_node,
    detect_content_type,
    determine_search_need,
    estimate_complexity,
)
from content_agent.agents.state import create_initial_state


class TestDetermineSearchNeed:

    @pytest.mark.parametrize("prompt", [
        "What is the current price of Bitcoin?",
        "Summarize the latest news on fusion energy",
        "Compare Python vs Rust for web servers",
        "how many people live in Tokyo",
        "Write about market trends in 2025",
    ])
    def test_factual_prompts_need_search(self, prompt):
        assert determine_search_need(prompt) is True

    @pytest.mark.parametrize("prompt", [
        "Write a haiku about autumn leaves",
        "Generate a short poem about the sea",
        "Compose a limerick about a cat",
    ])
    def test_creative_prompts_do_not(self, prompt):
        assert determine_search_need(prompt) is False

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    def test_blank_prompt(self, prompt):
        assert determine_search_need(prompt) is False

    def test_question_mark_triggers_search(self):
        assert determine_search_need("Tell me about dragons?") is True

    def test_indicator_needs_whole_word(self):
        # "generate" contains "rate"
        assert determine_search_need("Generate an upbeat birthday message") is False


class TestContentTypeDetection:

    def test_technical(self):
        result = detect_content_type("Write a tutorial on how to deploy a FastAPI server")
        assert result["type"] == "technical"
        assert 0.5 < result["confidence"] <= 0.95
        assert "tutorial" in result["indicators"]

    def test_story(self):
        result = detect_content_type("Once upon a time there was a dragon who loved books")
        assert result["type"] == "story"

    def test_no_indicators_is_general(self):
        result = detect_content_type("")
        assert result == {
            "type": "general",
            "confidence": 0.5,
            "indicators": ["no specific indicators found"],
        }

    def test_indicators_capped(self):
        prompt = "api code function algorithm implementation technical documentation sdk library"
        assert len(detect_content_type(prompt)["indicators"]) == 5

    def test_confidence_capped(self):
        prompt = "report analysis findings results data statistics metrics quarterly annual summary executive"
        assert detect_content_type(prompt)["confidence"] == 0.95


class TestEstimateComplexity:

    def test_thresholds(self):
        assert estimate_complexity("one two three") == "simple"
        assert estimate_complexity(" ".join(["word"] * 20)) == "medium"
        assert estimate_complexity(" ".join(["word"] * 60)) == "complex"


class TestAnalyzeNode:

    def test_search_prompt(self):
        state = create_initial_state("s-1", "What is the current price of Bitcoin?")
        result = analyze_node(state)

        assert result["needs_search"] is True
        assert result["status"] == "analyzing"
        assert result["metadata"]["node_history"] == ["analyze"]
        assert result["metadata"]["content_type_detection"]["type"] == result["content_type"]

    def test_creative_prompt(self, initial_state):
        result = analyze_node(initial_state)
        assert result["needs_search"] is False
        assert result["status"] == "analyzing"

    def test_empty_prompt(self):
        result = analyze_node(create_initial_state("s-1", ""))
        assert result["needs_search"] is False
        assert result["status"] == "analyzing"
        assert result["metadata"]["content_requirements"]["has_text_input"] is False

    def test_image_inputs_recorded(self):
        state = create_initial_state("s-1", "Describe these photos", [
            {"type": "image", "content": "https://img/1.png", "metadata": {}},
            {"type": "image", "content": "https://img/2.png", "metadata": {}},
            {"type": "text", "content": "extra notes", "metadata": {}},
        ])
        requirements = analyze_node(state)["metadata"]["content_requirements"]
        assert requirements["has_image_input"] is True
        assert requirements["image_count"] == 2

    def test_input_not_mutated(self, initial_state):
        analyze_node(initial_state)
        assert initial_state["status"] == "idle"
        assert initial_state["metadata"]["node_history"] == []

    @pytest.mark.parametrize("status", ["completed", "error"])
    def test_terminal_state_unchanged(self, initial_state, status):
        state = {**initial_state, "status": status}
        result = analyze_node(state)
        assert result == state
        assert result["metadata"]["node_history"] == []
