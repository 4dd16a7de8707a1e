from typing import Any

from app.mappers.query_builder import PR_TITLES, build_query, country_name
from app.schemas.contact import Confidence, Contact
from app.schemas.social import SocialPlatform
from app.services.pipeline import ProviderPipeline

SEARCH_URL = "https://api.linkedin.com/v2/search/people"
PROFILE_URL = "https://www.linkedin.com/in/{vanity}"
COUNT = 25


class LinkedInPipeline(ProviderPipeline):
    name = "LinkedIn"
    key = "linkedin"
    api_source = "LinkedIn (API)"
    fallback_source = "LinkedIn (Google Fallback)"
    fallback_label = "Google site: search"

    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        return {
            "keywords": build_query(query, country_name(country_code)),
            "title": " OR ".join(PR_TITLES),
            "count": COUNT,
        }

    async def fetch(self, request: dict[str, Any]) -> Any:
        resp = await self._client.get(
            SEARCH_URL,
            params=request,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
                "X-Restli-Protocol-Version": "2.0.0",
            },
        )
        self._raise_for_status(resp)
        return resp.json()

    def map_response(self, data: Any) -> list[Contact]:
        contacts: list[Contact] = []
        for person in data.get("elements") or []:
            name = f"{person.get('firstName') or ''} {person.get('lastName') or ''}".strip()
            vanity = person.get("vanityName")
            profile = PROFILE_URL.format(vanity=vanity) if vanity else None
            contacts.append(Contact(
                name=name,
                title=person.get("headline"),
                company=person.get("companyName"),
                linkedin=profile,
                url=profile,
                source=self.api_source,
                confidence=Confidence.high,
            ))
        return contacts

    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        # Profile pages are the target artifact, so no page scraping here
        profiles = await self._social.search_platform(SocialPlatform.linkedin, query, country_code)
        return [
            Contact(
                name=p.display_name,
                linkedin=p.profile_url,
                url=p.profile_url,
                title=p.bio[:100] or None,
                source="LinkedIn (Google site: search)",
                confidence=Confidence.medium,
            )
            for p in profiles
        ]
