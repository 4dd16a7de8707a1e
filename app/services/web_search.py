import logging

import httpx
from tavily import AsyncTavilyClient

from app.mappers.query_builder import full_country_name, search_region
from app.schemas.search import SearchResult

logger = logging.getLogger(__name__)

SERPER_URL = "https://google.serper.dev/search"
SERPER_SOURCE = "Google (Serper)"
TAVILY_SOURCE = "Tavily"

MAX_RESULTS = 10
_SERPER_NUM = 15  # over-fetch, links without URL are dropped


class WebSearchService:
    """Keyword web search over Serper (default) or Tavily.

    Shared by every fallback path, so it degrades to an empty list on a
    missing key or any upstream failure instead of raising.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        backend: str = "serper",
        max_results: int = MAX_RESULTS,
    ):
        self._client = client
        self._api_key = api_key
        self._backend = backend.lower()
        self._max_results = max_results
        self._tavily: AsyncTavilyClient | None = None
        if self._backend == "tavily" and api_key:
            self._tavily = AsyncTavilyClient(api_key=api_key)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: str, country_code: str = "ZA") -> list[SearchResult]:
        if not self.configured:
            logger.warning("Search backend %s not configured, returning no results", self._backend)
            return []
        try:
            if self._backend == "tavily":
                results = await self._search_tavily(query, country_code)
            else:
                results = await self._search_serper(query, country_code)
        except Exception:
            logger.exception("Web search failed for %r", query)
            return []
        logger.info("Web search %r (%s): %d results", query, country_code, len(results))
        return results[: self._max_results]

    async def _search_serper(self, query: str, country_code: str) -> list[SearchResult]:
        try:
            resp = await self._client.post(
                SERPER_URL,
                json={"q": query, "gl": search_region(country_code), "num": _SERPER_NUM},
                headers={
                    "X-API-KEY": self._api_key,
                    "Content-Type": "application/json",
                },
            )
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.TimeoutException):
            logger.exception("Serper API call failed for %r", query)
            return []

        data = resp.json()
        organic = data.get("organic") if isinstance(data, dict) else None
        if not organic:
            return []

        results: list[SearchResult] = []
        for item in organic:
            link = item.get("link")
            if not link:
                continue
            results.append(SearchResult(
                title=item.get("title") or "",
                url=link,
                snippet=item.get("snippet") or "",
                source=SERPER_SOURCE,
                position=item.get("position"),
                date=item.get("date"),
                image_url=item.get("imageUrl"),
            ))
        return results

    async def _search_tavily(self, query: str, country_code: str) -> list[SearchResult]:
        if self._tavily is None:
            return []
        params: dict = {"query": query, "max_results": self._max_results}
        if country := full_country_name(country_code):
            params["country"] = country
        result = await self._tavily.search(**params)

        results: list[SearchResult] = []
        for i, item in enumerate(result.get("results", []), start=1):
            url = item.get("url")
            if not url:
                continue
            results.append(SearchResult(
                title=item.get("title") or "",
                url=url,
                snippet=item.get("content") or "",
                source=TAVILY_SOURCE,
                position=i,
                date=item.get("published_date"),
            ))
        return results
