import json

import httpx
import pytest
import respx
from httpx import Response

from app.schemas.contact import Confidence
from app.services.zoominfo import AUTH_URL, SEARCH_URL, ZoomInfoPipeline
from tests.conftest import make_result


@respx.mock
@pytest.mark.asyncio
async def test_authenticates_then_searches(search_mock, extractor_mock, social_mock):
    auth = respx.post(AUTH_URL).mock(return_value=Response(200, json={"jwt": "jwt-123"}))
    search = respx.post(SEARCH_URL).mock(
        return_value=Response(200, json={"data": [{
            "firstName": "Kwame",
            "lastName": "Mensah",
            "email": "kwame@highlife.gh",
            "jobTitle": "A&R",
            "companyName": "Highlife Records",
            "phone": "+233 20 555 0100",
        }]})
    )

    async with httpx.AsyncClient() as client:
        pipeline = ZoomInfoPipeline(client, "zi-key", search_mock, extractor_mock, social_mock)
        result = await pipeline.search("highlife labels", "GH")

    assert result.api_used is True
    assert result.source == "ZoomInfo (API)"
    contact = result.contacts[0]
    assert contact.name == "Kwame Mensah"
    assert contact.phone == "+233 20 555 0100"
    assert contact.confidence == Confidence.high

    assert json.loads(auth.calls.last.request.content) == {"apiKey": "zi-key"}
    assert search.calls.last.request.headers["Authorization"] == "Bearer jwt-123"
    body = json.loads(search.calls.last.request.content)
    assert body["keyword"] == "highlife labels"
    assert body["countryCode"] == "GH"
    assert body["rpp"] == 25


@pytest.mark.asyncio
async def test_missing_token_falls_back(search_mock, extractor_mock, social_mock):
    with respx.mock(assert_all_called=False) as router:
        auth = router.post(AUTH_URL).mock(return_value=Response(200, json={}))
        search_route = router.post(SEARCH_URL)

        async with httpx.AsyncClient() as client:
            pipeline = ZoomInfoPipeline(client, "zi-key", search_mock, extractor_mock, social_mock)
            result = await pipeline.search("labels", "ZA")

    assert auth.called
    assert result.api_used is False
    assert result.source == "ZoomInfo Fallback (Google + Scrape)"
    assert any("authentication returned no token" in line for line in result.logs)
    assert not search_route.called


@pytest.mark.asyncio
async def test_fallback_query_and_limit(search_mock, extractor_mock, social_mock):
    search_mock.search.return_value = [
        make_result(f"Label {i} | Music", f"https://label{i}.co.za") for i in range(12)
    ]

    async with httpx.AsyncClient() as client:
        pipeline = ZoomInfoPipeline(client, "", search_mock, extractor_mock, social_mock)
        result = await pipeline.search("amapiano labels", "ZA")

    assert result.total == 10
    assert all(c.source == "ZoomInfo Fallback (Google)" for c in result.contacts)
    assert all(c.company is None for c in result.contacts)
    search_mock.search.assert_awaited_once_with(
        "amapiano labels music entertainment South Africa contact email", "ZA",
    )
