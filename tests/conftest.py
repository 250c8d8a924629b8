"""Pytest configuration and shared fixtures."""

from typing import List, Optional

import pytest

from content_agent.agents.driver import WorkflowDriver
from content_agent.agents.graph import WorkflowOptions
from content_agent.agents.state import create_initial_state
from content_agent.schemas.search import SearchResult
from content_agent.services.errors import StoreError
from content_agent.services.store import InMemorySessionStore

GENERATED_MARKDOWN = """# Autumn

Leaves fall **softly** on the *quiet* ground.

- red
- gold
"""


class FakeSearchProvider:
    """Records queries; returns canned results or raises ``error``."""

    def __init__(self, results: Optional[List[SearchResult]] = None, error: Optional[Exception] = None):
        self.results = results or []
        self.error = error
        self.queries: List[str] = []

    async def search(self, query: str, *, max_results: int = 5) -> List[SearchResult]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)[:max_results]


class FakeGenerationProvider:
    """Records the messages it was called with; returns ``content`` or raises ``error``."""

    def __init__(self, content: str = GENERATED_MARKDOWN, error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[list] = []

    async def generate(self, messages, *, model=None, temperature=0.7, max_tokens=4000) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.content


class FailingSaveStore(InMemorySessionStore):
    """In-memory store whose writes always fail."""

    async def save(self, session_id: str, patch: dict) -> None:
        raise StoreError("database unavailable")


def make_result(n: int, **overrides) -> SearchResult:
    data = {
        "title": f"Result {n}",
        "url": f"https://www.example{n}.com/article",
        "snippet": f"Snippet {n}",
        "source": f"example{n}.com",
    }
    data.update(overrides)
    return SearchResult(**data)


async def collect(snapshots) -> list:
    return [snapshot async for snapshot in snapshots]


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def search_provider():
    return FakeSearchProvider(results=[make_result(1), make_result(2)])


@pytest.fixture
def generation_provider():
    return FakeGenerationProvider()


@pytest.fixture
def options():
    return WorkflowOptions(max_search_results=5, approval_on_overwrite=True)


@pytest.fixture
def driver(store, search_provider, generation_provider, options):
    return WorkflowDriver(
        store=store,
        search_provider=search_provider,
        generation_provider=generation_provider,
        options=options,
    )


@pytest.fixture
def initial_state():
    return create_initial_state("session-1", "Write a haiku about autumn leaves")
