import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import UnknownProviderError
from app.exceptions.handlers import unknown_provider_error_handler
from app.jobs import JobStore
from app.routers.deep_search import router as deep_search_router
from app.routers.providers import router as providers_router
from app.routers.social import router as social_router
from app.services.deep_search import DeepSearchService, build_pipelines
from app.services.page_extractor import PageExtractorService
from app.services.social_search import SocialSearchService
from app.services.web_search import WebSearchService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        search_key = (
            settings.tavily_api_key
            if settings.search_backend.lower() == "tavily"
            else settings.serper_api_key
        )
        search = WebSearchService(client, search_key, backend=settings.search_backend)
        if not search.configured:
            logger.warning(
                "No %s API key set, every fallback path will return no results",
                settings.search_backend,
            )
        extractor = PageExtractorService(client)
        social = SocialSearchService(search)

        pipelines = build_pipelines(client, settings, search, extractor, social)
        app.state.deep_search_service = DeepSearchService(
            pipelines, provider_timeout=settings.provider_timeout,
        )
        app.state.social_search_service = social
        app.state.job_store = JobStore()

        yield


app = FastAPI(title="Contact Discovery", lifespan=lifespan)

app.add_exception_handler(UnknownProviderError, unknown_provider_error_handler)

app.include_router(deep_search_router)
app.include_router(providers_router)
app.include_router(social_router)
