from typing import Any

from app.mappers.query_builder import PR_TITLES, build_query, country_name
from app.schemas.contact import Confidence, Contact
from app.services.pipeline import ProviderPipeline

SEARCH_URL = "https://api.apollo.io/v1/mixed_people/search"
PER_PAGE = 25
FALLBACK_LIMIT = 5


class ApolloPipeline(ProviderPipeline):
    name = "Apollo"
    key = "apollo"
    api_source = "Apollo.io (API)"
    fallback_source = "Apollo Fallback (Google + Scrape)"

    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        return {
            "q_keywords": query,
            "person_locations": [country_name(country_code)],
            "person_titles": PR_TITLES,
            "per_page": PER_PAGE,
        }

    async def fetch(self, request: dict[str, Any]) -> Any:
        resp = await self._client.post(
            SEARCH_URL,
            json=request,
            headers={
                "Content-Type": "application/json",
                "Cache-Control": "no-cache",
                "X-Api-Key": self._api_key,
            },
        )
        self._raise_for_status(resp)
        return resp.json()

    def map_response(self, data: Any) -> list[Contact]:
        contacts: list[Contact] = []
        for person in data.get("people") or []:
            name = f"{person.get('first_name') or ''} {person.get('last_name') or ''}".strip()
            organization = person.get("organization") or {}
            verified = person.get("email_status") == "verified"
            contacts.append(Contact(
                name=name,
                email=person.get("email"),
                title=person.get("title"),
                company=organization.get("name"),
                linkedin=person.get("linkedin_url"),
                url=person.get("linkedin_url"),
                source=self.api_source,
                confidence=Confidence.high if verified else Confidence.medium,
            ))
        return contacts

    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        return await self._web_fallback(
            build_query(query, "music industry contacts email", country_name(country_code)),
            country_code,
            limit=FALLBACK_LIMIT,
            source="Apollo Fallback (Google)",
            with_company=True,
        )
