from fastapi import Request

from content_agent.agents.driver import WorkflowDriver
from content_agent.agents.graph import WorkflowOptions, get_checkpointer
from content_agent.config import settings
from content_agent.db.session import create_session_factory, get_engine
from content_agent.services.llm import LangChainGenerationProvider
from content_agent.services.search import TavilySearchProvider
from content_agent.services.sql_store import SqlSessionStore
from content_agent.services.store import InMemorySessionStore, SessionStore


def build_session_store() -> SessionStore:
    if settings.session_store == "memory":
        return InMemorySessionStore()
    return SqlSessionStore(create_session_factory(get_engine()))


def build_driver(store: SessionStore) -> WorkflowDriver:
    """Wire the production providers. Call from inside the event loop (lifespan)."""
    return WorkflowDriver(
        store=store,
        search_provider=TavilySearchProvider(),
        generation_provider=LangChainGenerationProvider(),
        options=WorkflowOptions.from_settings(),
        checkpointer=get_checkpointer(),
    )


def get_store(request: Request) -> SessionStore:
    """Dependency for the session store created at startup"""
    return request.app.state.store


def get_driver(request: Request) -> WorkflowDriver:
    """Dependency for the workflow driver created at startup"""
    return request.app.state.driver
