"""End-to-end workflow tests through the driver, with fake providers."""

import pytest

from content_agent.agents.driver import WorkflowDriver
from content_agent.agents.errors import WorkflowDefectError, WorkflowResumeError
from content_agent.agents.graph import WorkflowOptions, route_by_status
from content_agent.agents.state import create_initial_state
from content_agent.services.errors import ProviderError

from conftest import FailingSaveStore, FakeGenerationProvider, FakeSearchProvider, collect, make_result

BITCOIN_PROMPT = "What is the current price of Bitcoin?"
HAIKU_PROMPT = "Write a haiku about autumn leaves"


def _history(snapshot):
    return snapshot["metadata"]["node_history"]


class TestWorkflowRun:

    async def test_search_prompt_runs_every_phase(self, driver, search_provider, store):
        snapshots = await collect(driver.run("session-1", BITCOIN_PROMPT))

        assert [s["status"] for s in snapshots] == [
            "analyzing", "searching", "formatting", "saving", "completed",
        ]
        assert _history(snapshots[-1]) == ["analyze", "search", "generate", "format", "save"]
        assert search_provider.queries == [BITCOIN_PROMPT]

        final = snapshots[-1]
        assert len(final["search_results"]) == 2
        assert final["formatted_content"]["type"] == "doc"
        assert final["error"] is None

        record = await store.load("session-1")
        assert record.status == "completed"
        assert record.content == final["generated_content"]

    async def test_search_failure_still_completes(self, store, generation_provider, options):
        driver = WorkflowDriver(
            store=store,
            search_provider=FakeSearchProvider(error=ProviderError("unreachable")),
            generation_provider=generation_provider,
            options=options,
        )
        snapshots = await collect(driver.run("session-1", BITCOIN_PROMPT))

        assert len(snapshots) == 5
        final = snapshots[-1]
        assert final["status"] == "completed"
        assert final["search_results"] == []
        assert final["error"] is None
        assert "search" in _history(final)

    async def test_creative_prompt_skips_search(self, driver, search_provider):
        snapshots = await collect(driver.run("session-1", HAIKU_PROMPT))

        assert search_provider.queries == []
        assert _history(snapshots[-1]) == ["analyze", "generate", "format", "save"]
        assert snapshots[-1]["status"] == "completed"

    async def test_blank_prompt_asks_for_a_request(self, driver, search_provider, generation_provider):
        snapshots = await collect(driver.run("session-1", "   "))

        assert _history(snapshots[-1]) == ["analyze", "generate", "format", "save"]
        assert snapshots[-1]["status"] == "completed"
        assert search_provider.queries == []
        assert "asking the user" in generation_provider.calls[0][1]["content"]

    async def test_generation_failure(self, store, search_provider, options):
        driver = WorkflowDriver(
            store=store,
            search_provider=search_provider,
            generation_provider=FakeGenerationProvider(error=ProviderError("model overloaded")),
            options=options,
        )
        snapshots = await collect(driver.run("session-1", HAIKU_PROMPT))

        final = snapshots[-1]
        assert final["status"] == "error"
        assert "model overloaded" in final["error"]
        assert final["generated_content"] is None
        assert _history(final) == ["analyze", "generate"]

        record = await store.load("session-1")
        assert record.status == "error"
        assert "model overloaded" in record.metadata["error"]

    async def test_save_failure_keeps_content(self, search_provider, generation_provider, options):
        driver = WorkflowDriver(
            store=FailingSaveStore(),
            search_provider=search_provider,
            generation_provider=generation_provider,
            options=options,
        )
        final = (await collect(driver.run("session-1", HAIKU_PROMPT)))[-1]

        assert final["status"] == "error"
        assert "database unavailable" in final["error"]
        assert final["generated_content"] is not None

    async def test_node_history_only_grows(self, driver):
        snapshots = await collect(driver.run("session-1", BITCOIN_PROMPT))
        for previous, current in zip(snapshots, snapshots[1:]):
            assert _history(current)[:len(_history(previous))] == _history(previous)
            assert len(_history(current)) == len(_history(previous)) + 1

    async def test_search_urls_reach_the_generation_prompt(self, driver, generation_provider):
        await collect(driver.run("session-1", BITCOIN_PROMPT))

        user_message = generation_provider.calls[0][1]["content"]
        for n in (1, 2):
            assert make_result(n).url in user_message

    async def test_snapshots_are_independent(self, driver):
        snapshots = await collect(driver.run("session-1", BITCOIN_PROMPT))

        snapshots[0]["metadata"]["node_history"].append("tampered")
        snapshots[0]["search_results"].append({"title": "x"})

        assert "tampered" not in _history(snapshots[1])
        assert len(snapshots[-1]["search_results"]) == 2


class TestApprovalFlow:

    async def test_waits_for_approval(self, driver, store, generation_provider):
        snapshots = await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True))

        final = snapshots[-1]
        assert final["status"] == "waiting_approval"
        assert _history(final) == ["analyze", "approval"]
        assert final["pending_approval"]["kind"] == "generate_content"
        assert generation_provider.calls == []
        assert (await store.load("session-1")).status == "waiting_approval"

    async def test_resume_while_pending(self, driver):
        await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True))

        snapshots = await collect(driver.resume("session-1"))

        assert len(snapshots) == 1
        assert snapshots[0]["status"] == "waiting_approval"

    async def test_approve_and_resume(self, driver, store):
        waiting = (await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True)))[-1]
        await driver.approval_gate.resolve(waiting["pending_approval"]["id"], True)

        snapshots = await collect(driver.resume("session-1"))

        assert [s["status"] for s in snapshots] == ["generating", "formatting", "saving", "completed"]
        assert _history(snapshots[-1]) == ["analyze", "approval", "generate", "format", "save"]
        assert snapshots[-1]["metadata"]["approval"]["status"] == "approved"
        assert (await store.load("session-1")).status == "completed"

    async def test_reject_and_resume(self, driver, store, generation_provider):
        waiting = (await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True)))[-1]
        await driver.approval_gate.resolve(waiting["pending_approval"]["id"], False, "not needed")

        snapshots = await collect(driver.resume("session-1"))

        assert len(snapshots) == 1
        assert snapshots[0]["status"] == "error"
        assert "rejected" in snapshots[0]["error"]
        assert generation_provider.calls == []
        assert (await store.load("session-1")).status == "error"

    async def test_resume_from_another_driver(self, driver, store, search_provider, options):
        waiting = (await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True)))[-1]
        other_generator = FakeGenerationProvider()
        other = WorkflowDriver(
            store=store,
            search_provider=search_provider,
            generation_provider=other_generator,
            options=options,
        )
        approval = await store.get_approval_request(waiting["pending_approval"]["id"])

        pending = await other.pending_state(approval)
        assert pending["status"] == "waiting_approval"
        assert _history(pending) == ["analyze", "approval"]

        await other.approval_gate.resolve(approval.id, True)
        snapshots = await collect(other.resume("session-1"))

        assert [s["status"] for s in snapshots] == ["generating", "formatting", "saving", "completed"]
        assert _history(snapshots[-1]) == ["analyze", "approval", "generate", "format", "save"]
        assert len(other_generator.calls) == 1
        record = await store.load("session-1")
        assert record.status == "completed"
        assert "suspended_state" not in record.metadata

    async def test_pending_state_without_suspended_run(self, driver, store):
        approval = await store.create_approval_request("session-9", "generate_content", {})

        with pytest.raises(WorkflowResumeError):
            await driver.pending_state(approval)

    async def test_pending_state_for_superseded_request(self, driver, store):
        first = (await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True)))[-1]
        second = (await collect(driver.run("session-1", HAIKU_PROMPT, require_approval=True)))[-1]
        stale = await store.get_approval_request(first["pending_approval"]["id"])
        current = await store.get_approval_request(second["pending_approval"]["id"])

        with pytest.raises(WorkflowResumeError):
            await driver.pending_state(stale)
        assert (await driver.pending_state(current))["pending_approval"]["id"] == current.id

    async def test_resume_after_completion(self, driver):
        await collect(driver.run("session-1", HAIKU_PROMPT))

        snapshots = await collect(driver.resume("session-1"))

        assert len(snapshots) == 1
        assert snapshots[0]["status"] == "completed"

    async def test_resume_unknown_session(self, driver):
        with pytest.raises(WorkflowResumeError):
            await collect(driver.resume("never-started"))

    async def test_existing_content_requires_approval(self, driver, store):
        await store.save("session-1", {"content": "An older draft", "status": "completed"})

        final = (await collect(driver.run("session-1", HAIKU_PROMPT)))[-1]

        assert final["status"] == "waiting_approval"
        assert final["pending_approval"]["kind"] == "overwrite_content"
        assert final["pending_approval"]["payload"]["existing_content_preview"] == "An older draft"

    async def test_overwrite_approval_disabled(self, store, search_provider, generation_provider):
        driver = WorkflowDriver(
            store=store,
            search_provider=search_provider,
            generation_provider=generation_provider,
            options=WorkflowOptions(approval_on_overwrite=False),
        )
        await store.save("session-1", {"content": "An older draft", "status": "completed"})

        final = (await collect(driver.run("session-1", HAIKU_PROMPT)))[-1]

        assert final["status"] == "completed"
        assert (await store.load("session-1")).content == generation_provider.content


class TestRouting:

    @pytest.mark.parametrize("status, expected", [
        ("idle", "analyze"),
        ("formatting", "format"),
        ("saving", "save"),
        ("waiting_approval", "__end__"),
        ("completed", "__end__"),
        ("error", "__end__"),
    ])
    def test_transition_table(self, status, expected):
        assert route_by_status({"status": status}) == expected

    def test_analysis_routes_on_search_need(self):
        assert route_by_status({"status": "analyzing", "needs_search": True}) == "search"
        assert route_by_status({"status": "analyzing", "needs_search": False}) == "generate"
        assert route_by_status({
            "status": "analyzing", "needs_search": False, "requires_approval": True,
        }) == "approval"

    def test_search_routes_to_generation(self):
        assert route_by_status({"status": "searching"}) == "generate"
        assert route_by_status({"status": "searching", "requires_approval": True}) == "approval"

    def test_generating_respects_approval(self):
        assert route_by_status({"status": "generating"}) == "generate"
        assert route_by_status({"status": "generating", "requires_approval": True}) == "approval"
        assert route_by_status({
            "status": "generating", "requires_approval": True, "approval_granted": True,
        }) == "generate"

    def test_unknown_status_is_a_defect(self):
        with pytest.raises(WorkflowDefectError):
            route_by_status({"session_id": "s-1", "status": "paused"})

    async def test_graph_rejects_unknown_status(self, driver):
        state = create_initial_state("session-1", HAIKU_PROMPT)
        state["status"] = "paused"
        with pytest.raises(WorkflowDefectError):
            async for _ in driver.graph.astream(
                state, {"configurable": {"thread_id": "session-1"}}, stream_mode="values"
            ):
                pass
