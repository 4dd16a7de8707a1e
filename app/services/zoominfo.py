from typing import Any

from app.exceptions.custom import ProviderError
from app.mappers.query_builder import PR_INDUSTRIES, PR_TITLES, build_query, country_name
from app.schemas.contact import Confidence, Contact
from app.services.pipeline import ProviderPipeline

AUTH_URL = "https://api.zoominfo.com/authenticate"
SEARCH_URL = "https://api.zoominfo.com/search/contact"
RESULTS_PER_PAGE = 25
FALLBACK_LIMIT = 10


class ZoomInfoPipeline(ProviderPipeline):
    name = "ZoomInfo"
    key = "zoominfo"
    api_source = "ZoomInfo (API)"
    fallback_source = "ZoomInfo Fallback (Google + Scrape)"

    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        return {
            "searchType": "contact",
            "rpp": RESULTS_PER_PAGE,
            "keyword": query,
            "jobTitle": " OR ".join(PR_TITLES),
            "companyIndustry": PR_INDUSTRIES,
            "countryCode": country_code,
        }

    async def _authenticate(self) -> str:
        resp = await self._client.post(
            AUTH_URL,
            json={"apiKey": self._api_key},
            headers={"Content-Type": "application/json"},
        )
        self._raise_for_status(resp)
        jwt = resp.json().get("jwt")
        if not jwt:
            raise ProviderError(self.name, "ZoomInfo authentication returned no token")
        return jwt

    async def fetch(self, request: dict[str, Any]) -> Any:
        jwt = await self._authenticate()
        resp = await self._client.post(
            SEARCH_URL,
            json=request,
            headers={
                "Authorization": f"Bearer {jwt}",
                "Content-Type": "application/json",
            },
        )
        self._raise_for_status(resp)
        return resp.json()

    def map_response(self, data: Any) -> list[Contact]:
        contacts: list[Contact] = []
        for c in data.get("data") or []:
            contacts.append(Contact(
                name=f"{c.get('firstName') or ''} {c.get('lastName') or ''}".strip(),
                email=c.get("email"),
                title=c.get("jobTitle"),
                company=c.get("companyName"),
                phone=c.get("phone"),
                linkedin=c.get("linkedinUrl"),
                url=c.get("linkedinUrl"),
                source=self.api_source,
                confidence=Confidence.high,
            ))
        return contacts

    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        return await self._web_fallback(
            build_query(query, "music entertainment", country_name(country_code), "contact email"),
            country_code,
            limit=FALLBACK_LIMIT,
            source="ZoomInfo Fallback (Google)",
        )
