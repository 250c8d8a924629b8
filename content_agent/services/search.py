"""Web search provider backed by the Tavily search API."""

from typing import Optional, Protocol
from urllib.parse import urlparse
import logging

import httpx

from content_agent.config import settings
from content_agent.constants import DEFAULT_MAX_SEARCH_RESULTS
from content_agent.schemas.search import SearchResult
from content_agent.services.errors import ProviderError

logger = logging.getLogger(__name__)


class SearchProvider(Protocol):
    async def search(self, query: str, *, max_results: int = DEFAULT_MAX_SEARCH_RESULTS) -> list[SearchResult]:
        ...


def source_from_url(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


class TavilySearchProvider:
    """
    Search the web through Tavily.

    Every failure mode (missing key, transport errors, non-2xx responses,
    malformed payloads) is raised as ``ProviderError``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        search_depth: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.tavily_api_key if api_key is None else api_key
        self.base_url = base_url or settings.tavily_api_url
        self.search_depth = search_depth or settings.tavily_search_depth
        self.timeout = timeout or settings.search_timeout_seconds
        self._transport = transport

    async def search(self, query: str, *, max_results: int = DEFAULT_MAX_SEARCH_RESULTS) -> list[SearchResult]:
        if not self.api_key:
            raise ProviderError("TAVILY_API_KEY is required for web search")
        if not query or not query.strip():
            raise ProviderError("Search query must not be empty")

        payload = {
            "query": query.strip(),
            "max_results": max_results,
            "search_depth": self.search_depth,
            "include_answer": False,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Authorization": f"Bearer {self.api_key}"},
            ) as client:
                response = await client.post("/search", json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Search request failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Search request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Search response is not valid JSON") from e

        results = self._parse_results(body)
        logger.debug(f"Tavily returned {len(results)} results for query '{query}'")
        return results[:max_results]

    @staticmethod
    def _parse_results(body) -> list[SearchResult]:
        if not isinstance(body, dict) or not isinstance(body.get("results"), list):
            raise ProviderError("Malformed search response: missing 'results' list")

        results = []
        for item in body["results"]:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            url = str(item["url"])
            results.append(SearchResult(
                title=str(item.get("title") or ""),
                url=url,
                snippet=str(item.get("content") or ""),
                source=source_from_url(url),
            ))
        return results
