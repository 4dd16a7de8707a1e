import asyncio
from typing import Any

import httpx
import pytest
import respx
from httpx import Response

from app.config import Settings
from app.exceptions.custom import UnknownProviderError
from app.schemas.contact import Confidence, Contact
from app.schemas.social import SocialPlatform, SocialProfile
from app.services import apollo
from app.services.deep_search import DeepSearchService, build_pipelines
from app.services.pipeline import ProviderPipeline
from tests.conftest import make_result


class StubPipeline(ProviderPipeline):
    """Pipeline with canned native contacts and no fallback."""

    api_source = "Stub (API)"
    fallback_source = "Stub Fallback"

    def __init__(self, name, contacts=(), api_key="key", delay=0.0, error=None):
        super().__init__(None, api_key, None, None, None)
        self.name = name
        self.key = name.lower()
        self._contacts = list(contacts)
        self._delay = delay
        self._error = error

    def build_request(self, query: str, country_code: str) -> dict[str, Any]:
        return {"q": query}

    async def fetch(self, request: dict[str, Any]) -> Any:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._contacts

    def map_response(self, data: Any) -> list[Contact]:
        return data

    async def fallback(self, query: str, country_code: str) -> list[Contact]:
        return []

    async def search(self, query: str, country_code: str = "ZA"):
        if self._error:
            raise self._error
        return await super().search(query, country_code)


def _contact(name, confidence=Confidence.low, **fields):
    return Contact(name=name, source="stub", confidence=confidence, **fields)


def _stubs(**overrides):
    """Four stubs named after the real providers so status() validates."""
    names = ("Apollo", "LinkedIn", "ZoomInfo", "PhantomBuster")
    return [overrides.get(n) or StubPipeline(n) for n in names]


@pytest.mark.asyncio
async def test_merges_and_ranks_across_pipelines():
    service = DeepSearchService(_stubs(
        Apollo=StubPipeline("Apollo", [
            _contact("Jane Doe", email="j@x.com"),
            _contact("Low One"),
        ]),
        LinkedIn=StubPipeline("LinkedIn", [
            _contact("jane doe ", Confidence.high, email="jane@y.com", title="Editor"),
            _contact("Mid One", Confidence.medium),
            _contact("Al", Confidence.high),
        ]),
        ZoomInfo=StubPipeline("ZoomInfo", [_contact("Top One", Confidence.high)]),
    ))

    result = await service.run("amapiano", "ZA")

    assert [c.name for c in result.contacts] == ["Jane Doe", "Top One", "Mid One", "Low One"]
    jane = result.contacts[0]
    assert jane.email == "j@x.com"
    assert jane.title == "Editor"
    assert jane.confidence == Confidence.high
    assert result.total == 4
    assert result.logs[0] == (
        "[DeepSearch] Pipeline status: Apollo=on LinkedIn=on ZoomInfo=on PhantomBuster=on"
    )
    assert result.logs[-1] == "[DeepSearch] Total: 4 unique contacts (from 6 raw results)"
    assert result.apis_used == ["Apollo", "LinkedIn", "ZoomInfo"]
    assert result.apis_unavailable == ["PhantomBuster"]
    assert set(result.pipeline_results) == {"Apollo", "LinkedIn", "ZoomInfo", "PhantomBuster"}


@pytest.mark.asyncio
async def test_failing_pipeline_is_isolated():
    service = DeepSearchService(_stubs(
        Apollo=StubPipeline("Apollo", error=RuntimeError("kaboom")),
        ZoomInfo=StubPipeline("ZoomInfo", [_contact("Kwame Mensah", Confidence.high)]),
    ))

    result = await service.run("highlife", "GH")

    assert [c.name for c in result.contacts] == ["Kwame Mensah"]
    failed = result.pipeline_results["Apollo"]
    assert failed.contacts == []
    assert failed.api_used is False
    assert failed.source == "Stub Fallback"
    assert any(line.startswith("[Apollo] Pipeline failed:") for line in result.logs)
    assert "Apollo" in result.apis_unavailable


@pytest.mark.asyncio
async def test_hanging_pipeline_times_out():
    service = DeepSearchService(
        _stubs(
            LinkedIn=StubPipeline("LinkedIn", [_contact("Slow Person")], delay=5),
            Apollo=StubPipeline("Apollo", [_contact("Fast Person", Confidence.high)]),
        ),
        provider_timeout=0.05,
    )

    result = await asyncio.wait_for(service.run("jazz", "ZA"), timeout=2)

    assert [c.name for c in result.contacts] == ["Fast Person"]
    assert "[LinkedIn] Pipeline timed out after 0.05s" in result.logs
    assert "LinkedIn" in result.apis_unavailable


def test_status_reflects_credentials():
    service = DeepSearchService(_stubs(
        ZoomInfo=StubPipeline("ZoomInfo", api_key=""),
        PhantomBuster=StubPipeline("PhantomBuster", api_key=""),
    ))

    status = service.status()

    assert status.apollo is True
    assert status.linkedin is True
    assert status.zoominfo is False
    assert status.phantombuster is False


def test_get_pipeline_is_case_insensitive():
    service = DeepSearchService(_stubs())

    assert service.get_pipeline(" ZoomInfo ").name == "ZoomInfo"
    with pytest.raises(UnknownProviderError):
        service.get_pipeline("crunchbase")


# --- Wired with the real providers ---


def _settings(**keys) -> Settings:
    values = {
        "apollo_api_key": "", "linkedin_api_key": "", "zoominfo_api_key": "",
        "phantombuster_api_key": "", "phantombuster_agent_id": "",
    }
    values.update(keys)
    return Settings(_env_file=None, **values)


@pytest.mark.asyncio
async def test_no_credentials_uses_every_fallback(search_mock, extractor_mock, social_mock):
    search_mock.search.return_value = [
        make_result(f"Amapiano Blog {i} | Blog {i}", f"https://blog{i}.co.za") for i in range(5)
    ]

    async def _platform(platform, query, country_code="ZA"):
        return [SocialProfile(
            platform=platform,
            display_name=f"{platform} person",
            profile_url=f"https://{platform}.com/person",
            source=f"Google (site:{platform})",
        )]

    social_mock.search_platform.side_effect = _platform

    async with httpx.AsyncClient() as client:
        service = DeepSearchService(
            build_pipelines(client, _settings(), search_mock, extractor_mock, social_mock),
        )
        result = await service.run("amapiano bloggers", "ZA")

    assert result.apis_used == []
    assert result.apis_unavailable == ["Apollo", "LinkedIn", "ZoomInfo", "PhantomBuster"]
    assert result.contacts
    assert {c.confidence for c in result.contacts} <= {Confidence.low, Confidence.medium}
    names = [c.name.strip().casefold() for c in result.contacts]
    assert len(names) == len(set(names))
    social_platforms = {call.args[0] for call in social_mock.search_platform.await_args_list}
    assert social_platforms == {
        SocialPlatform.linkedin, SocialPlatform.instagram, SocialPlatform.tiktok,
    }


@respx.mock
@pytest.mark.asyncio
async def test_apollo_credential_gives_high_contacts(search_mock, extractor_mock, social_mock):
    respx.post(apollo.SEARCH_URL).mock(
        return_value=Response(200, json={"people": [
            {"first_name": n, "last_name": "Test", "email_status": "verified"}
            for n in ("Anele", "Bongi", "Carla")
        ]})
    )

    async with httpx.AsyncClient() as client:
        service = DeepSearchService(build_pipelines(
            client, _settings(apollo_api_key="apollo-key"),
            search_mock, extractor_mock, social_mock,
        ))
        result = await service.run("amapiano bloggers", "ZA")

    assert result.apis_used == ["Apollo"]
    high = [c for c in result.contacts if c.confidence == Confidence.high]
    assert [c.name for c in high] == ["Anele Test", "Bongi Test", "Carla Test"]
    assert result.pipeline_results["Apollo"].api_used is True
    assert result.logs[0].startswith("[DeepSearch] Pipeline status: Apollo=on LinkedIn=off")
