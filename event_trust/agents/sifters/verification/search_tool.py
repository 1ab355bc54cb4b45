"""Web search tool exposed to the corroboration agent as ``search_web``.

Queries a public HTML search endpoint (DuckDuckGo by default) and extracts
the first few result titles and snippets. The contract is best effort:
zero results is a normal outcome, and every failure is returned as data
instead of raised, so a flaky endpoint only ever weakens the evidence for
one candidate.

Result shapes:
    {"found": True, "results": ["title - snippet", ...]}
    {"found": False, "message": "No results found"}
    {"found": False, "message": "rate limited"}
    {"found": False, "error": "..."}

Usage:
    from event_trust.agents.sifters.verification.search_tool import WebSearchTool

    tool = WebSearchTool()
    outcome = await tool.search("Jazz Night Lagniappe Miami 2026-03-14")
    await tool.aclose()
"""

from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from event_trust.config.settings import settings
from event_trust.errors import ToolError
from event_trust.llm.messages import ToolSpec
from event_trust.llm.rate_limiter import RateLimiter
from event_trust.utils.logging import get_structured_logger

SEARCH_TOOL_NAME = "search_web"

USER_AGENT = "Mozilla/5.0 (compatible; EventTrustBot/1.0)"

NO_RESULTS_MESSAGE = "No results found"
RATE_LIMITED_MESSAGE = "rate limited"


class WebSearchTool:
    """HTTP GET search against a public results page.

    Attributes:
        spec: Tool description handed to the LLM client
        endpoint: Search results URL
        max_results: Titles/snippets kept per query
    """

    spec = ToolSpec(
        name=SEARCH_TOOL_NAME,
        description="Search the web for information about an event.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Web search query"},
            },
            "required": ["query"],
        },
    )

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        max_results: Optional[int] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """Initialize the search tool.

        Args:
            client: Shared httpx.AsyncClient. Created lazily when None.
            endpoint: Search results URL (defaults to settings).
            timeout: Request timeout in seconds (defaults to settings).
            max_results: Results kept per query (defaults to settings).
            rate_limiter: Optional RPM limiter for the endpoint.
        """
        self.endpoint = endpoint or settings.search_endpoint
        self.timeout = settings.search_timeout if timeout is None else timeout
        self.max_results = max_results or settings.search_max_results
        self._client = client
        self._owns_client = client is None
        self._rate_limiter = rate_limiter
        self.invocations = 0
        self._logger = get_structured_logger("WebSearchTool")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT, "Accept": "text/html"},
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this tool created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __call__(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        """Tool handler entry point: ``{"query": str}`` in, result dict out."""
        query = str(tool_input.get("query", "")).strip()
        if not query:
            return {"found": False, "error": "query is required"}
        return await self.search(query)

    async def search(self, query: str) -> dict[str, Any]:
        """Run one search. Never raises.

        Args:
            query: Web search query.

        Returns:
            One of the result shapes listed in the module docstring.
        """
        self.invocations += 1

        if self._rate_limiter and not await self._rate_limiter.acquire():
            self._logger.debug("search_rate_limited", query=query[:50])
            return {"found": False, "message": RATE_LIMITED_MESSAGE}

        try:
            html = await self._fetch(query)
            results = self.parse_results(html, self.max_results)
        except Exception as e:
            self._logger.warning("search_failed", query=query[:50], error=str(e))
            return {"found": False, "error": str(e) or type(e).__name__}

        self._logger.info("search_executed", query=query[:80], results=len(results))
        if not results:
            return {"found": False, "message": NO_RESULTS_MESSAGE}
        return {"found": True, "results": results}

    async def _fetch(self, query: str) -> str:
        client = await self._get_client()
        try:
            response = await client.get(
                self.endpoint,
                params={"q": query},
                headers={"User-Agent": USER_AGENT, "Accept": "text/html"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ToolError(f"search timed out after {self.timeout:.0f}s") from e
        except httpx.HTTPError as e:
            raise ToolError(f"search request failed: {e}") from e

        if response.status_code >= 400:
            raise ToolError(f"search endpoint returned HTTP {response.status_code}")
        return response.text

    @staticmethod
    def parse_results(html: str, max_results: int = 5) -> list[str]:
        """Pair result titles with snippets, first max_results of each."""
        soup = BeautifulSoup(html, "html.parser")
        titles = [
            a.get_text(" ", strip=True)
            for a in soup.select("a.result__a")[:max_results]
        ]
        snippets = [
            a.get_text(" ", strip=True)
            for a in soup.select(".result__snippet")[:max_results]
        ]

        results = []
        for i in range(max(len(titles), len(snippets))):
            parts = [
                text
                for text in (
                    titles[i] if i < len(titles) else "",
                    snippets[i] if i < len(snippets) else "",
                )
                if text
            ]
            if parts:
                results.append(" - ".join(parts))
        return results
