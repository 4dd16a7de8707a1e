from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import ASGITransport

from app.schemas.search import SearchResult
from app.services.page_extractor import PageExtractorService
from app.services.social_search import SocialSearchService
from app.services.web_search import WebSearchService

_ENV_KEYS = (
    "SERPER_API_KEY", "TAVILY_API_KEY", "APOLLO_API_KEY", "LINKEDIN_API_KEY",
    "ZOOMINFO_API_KEY", "PHANTOMBUSTER_API_KEY", "PHANTOMBUSTER_AGENT_ID",
)


def make_result(title: str, url: str, snippet: str = "", position: int | None = None) -> SearchResult:
    return SearchResult(title=title, url=url, snippet=snippet, source="Google (Serper)", position=position)


@pytest.fixture
def http_client():
    return httpx.AsyncClient()


@pytest.fixture
def search_mock():
    mock = AsyncMock(spec=WebSearchService)
    mock.search.return_value = []
    return mock


@pytest.fixture
def extractor_mock():
    mock = AsyncMock(spec=PageExtractorService)
    mock.extract_many.return_value = {}
    return mock


@pytest.fixture
def social_mock():
    mock = AsyncMock(spec=SocialSearchService)
    mock.search_platform.return_value = []
    return mock


@pytest.fixture
def mock_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.setenv(key, "")
    monkeypatch.setenv("SEARCH_BACKEND", "serper")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
