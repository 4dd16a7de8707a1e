"""Generic provider pipeline.

Every provider follows the same contract: use the native API when a
credential is configured, otherwise (or when the native call fails)
approximate it with web search, page extraction or social search.
Subclasses only supply the provider-specific pieces.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from app.exceptions.custom import ProviderError
from app.mappers.query_builder import clean_title, title_suffix
from app.schemas.contact import Confidence, Contact, PipelineResult
from app.services.page_extractor import PageExtractorService
from app.services.social_search import SocialSearchService
from app.services.web_search import WebSearchService

logger = logging.getLogger(__name__)

SCRAPE_TOP = 3

# Errors that mean "provider unavailable" rather than a bug
_NATIVE_ERRORS = (
    ProviderError, httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError,
)


class ProviderPipeline(ABC):
    name: str  # display name, e.g. "Apollo"
    key: str  # status key, e.g. "apollo"
    api_source: str
    fallback_source: str
    fallback_label: str = "Google Search fallback"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        search: WebSearchService,
        extractor: PageExtractorService,
        social: SocialSearchService,
    ):
        self._client = client
        self._api_key = api_key
        self._search = search
        self._extractor = extractor
        self._social = social

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    @abstractmethod
    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        """Shape the native request for this provider."""

    @abstractmethod
    async def fetch(self, request: dict[str, Any]) -> Any:
        """Perform the native call; raise ProviderError on non-success."""

    @abstractmethod
    def map_response(self, data: Any) -> list[Contact]:
        """Map a successful native payload to contacts."""

    @abstractmethod
    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        """Approximate the provider without its API."""

    async def search(self, query: str, country_code: str = "ZA") -> PipelineResult:
        """Run the pipeline. Never raises; failures end up in ``logs``."""
        logs: list[str] = []

        if self.has_credentials:
            logs.append(f"[{self.name}] API key detected, using {self.api_source}")
            contacts = await self._run_native(query, country_code, logs)
            if contacts:
                logs.append(f"[{self.name}] Found {len(contacts)} contacts via API")
                return PipelineResult.build(contacts, self.api_source, True, logs)
        else:
            logs.append(f"[{self.name}] No API key, using {self.fallback_label}")

        try:
            contacts = await self.fallback(query, country_code)
        except Exception as exc:
            logger.exception("%s fallback failed for %r", self.name, query)
            logs.append(f"[{self.name}] Fallback failed: {exc}")
            contacts = []

        logs.append(f"[{self.name}] Found {len(contacts)} contacts via {self.fallback_label}")
        return PipelineResult.build(contacts, self.fallback_source, False, logs)

    async def _run_native(
        self, query: str, country_code: str, logs: list[str],
    ) -> list[Contact]:
        try:
            request = self.build_request(query, country_code)
            data = await self.fetch(request)
            contacts = [c for c in self.map_response(data) if c.name.strip()]
        except _NATIVE_ERRORS as exc:
            logger.warning("%s API call failed: %s", self.name, exc)
            logs.append(f"[{self.name}] API error: {exc}, falling back to {self.fallback_label}")
            return []
        except Exception as exc:
            logger.exception("%s API call raised unexpectedly", self.name)
            logs.append(f"[{self.name}] API error: {exc}, falling back to {self.fallback_label}")
            return []

        if not contacts:
            logs.append(f"[{self.name}] API returned no contacts, falling back to {self.fallback_label}")
        return contacts

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code >= 400:
            raise ProviderError(
                self.name,
                f"{self.name} API returned {resp.status_code}",
                status_code=resp.status_code,
            )

    async def _web_fallback(
        self,
        query: str,
        country_code: str,
        limit: int,
        source: str,
        with_company: bool = False,
    ) -> list[Contact]:
        """Search results as low-confidence contacts, upgraded by scraped emails."""
        results = (await self._search.search(query, country_code))[:limit]
        contacts = [
            Contact(
                name=clean_title(r.title),
                url=r.url,
                company=title_suffix(r.title) if with_company else None,
                source=source,
                confidence=Confidence.low,
            )
            for r in results
        ]
        if not contacts:
            return contacts

        pages = await self._extractor.extract_many([c.url for c in contacts[:SCRAPE_TOP]])
        enriched: list[Contact] = []
        for contact in contacts:
            page = pages.get(contact.url)
            if page and page.emails and not contact.email:
                contact = contact.model_copy(
                    update={"email": page.emails[0], "confidence": Confidence.medium},
                )
            enriched.append(contact)
        return enriched
