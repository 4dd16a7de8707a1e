import asyncio
import json
import logging
from typing import Any

import httpx

from app.exceptions.custom import ProviderError
from app.schemas.contact import Confidence, Contact
from app.schemas.social import SocialPlatform
from app.services.page_extractor import PageExtractorService
from app.services.pipeline import ProviderPipeline
from app.services.social_search import SocialSearchService
from app.services.web_search import WebSearchService

logger = logging.getLogger(__name__)

FETCH_OUTPUT_URL = "https://api.phantombuster.com/api/v2/agents/fetch-output"

# platform -> (Contact field, source label)
_FALLBACK_PLATFORMS = {
    SocialPlatform.instagram: ("instagram", "PhantomBuster Fallback (Instagram via Google)"),
    SocialPlatform.tiktok: ("tiktok", "PhantomBuster Fallback (TikTok via Google)"),
}


class PhantomBusterPipeline(ProviderPipeline):
    name = "PhantomBuster"
    key = "phantombuster"
    api_source = "PhantomBuster (API)"
    fallback_source = "PhantomBuster Fallback (Social Search)"
    fallback_label = "social media search fallback"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        search: WebSearchService,
        extractor: PageExtractorService,
        social: SocialSearchService,
        agent_id: str = "",
    ):
        super().__init__(client, api_key, search, extractor, social)
        self._agent_id = agent_id

    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        return {"id": self._agent_id, "query": query}

    async def fetch(self, request: dict[str, Any]) -> Any:
        if not request.get("id"):
            raise ProviderError(self.name, "No PhantomBuster agent id configured")
        resp = await self._client.post(
            FETCH_OUTPUT_URL,
            json=request,
            headers={
                "X-Phantombuster-Key": self._api_key,
                "Content-Type": "application/json",
            },
        )
        self._raise_for_status(resp)
        return resp.json()

    def map_response(self, data: Any) -> list[Contact]:
        rows = data.get("resultObject") or []
        # The agent output is sometimes delivered as a JSON-encoded string
        if isinstance(rows, str):
            rows = json.loads(rows)

        contacts: list[Contact] = []
        for c in rows:
            followers = c.get("followers")
            contacts.append(Contact(
                name=c.get("name") or c.get("fullName") or "",
                email=c.get("email"),
                title=c.get("title") or c.get("headline"),
                company=c.get("companyName"),
                instagram=c.get("instagram"),
                twitter=c.get("twitter"),
                tiktok=c.get("tiktok"),
                linkedin=c.get("linkedin"),
                followers=str(followers) if followers is not None else None,
                url=c.get("profileUrl") or c.get("linkedin") or None,
                source=self.api_source,
                confidence=Confidence.high,
            ))
        return contacts

    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        platforms = list(_FALLBACK_PLATFORMS)
        gather_results = await asyncio.gather(
            *(self._social.search_platform(p, query, country_code) for p in platforms),
            return_exceptions=True,
        )

        contacts: list[Contact] = []
        for platform, res in zip(platforms, gather_results):
            if isinstance(res, BaseException):
                logger.warning("PhantomBuster fallback on %s failed: %s", platform, res)
                continue
            field, source = _FALLBACK_PLATFORMS[platform]
            for profile in res:
                contacts.append(Contact(
                    name=profile.display_name,
                    url=profile.profile_url,
                    source=source,
                    confidence=Confidence.medium,
                    **{field: profile.profile_url},
                ))
        return contacts
