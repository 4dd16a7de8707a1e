import asyncio
import logging

import httpx

from app.config import Settings
from app.exceptions.custom import UnknownProviderError
from app.mappers.contact_merger import dedup_contacts, rank_contacts
from app.schemas.contact import Contact, DeepSearchResult, PipelineResult, ProviderStatus
from app.services.apollo import ApolloPipeline
from app.services.linkedin import LinkedInPipeline
from app.services.page_extractor import PageExtractorService
from app.services.phantombuster import PhantomBusterPipeline
from app.services.pipeline import ProviderPipeline
from app.services.social_search import SocialSearchService
from app.services.web_search import WebSearchService
from app.services.zoominfo import ZoomInfoPipeline

logger = logging.getLogger(__name__)


def build_pipelines(
    client: httpx.AsyncClient,
    settings: Settings,
    search: WebSearchService,
    extractor: PageExtractorService,
    social: SocialSearchService,
) -> list[ProviderPipeline]:
    """The four providers in cascade order, credentials taken from settings."""
    deps = (search, extractor, social)
    return [
        ApolloPipeline(client, settings.apollo_api_key, *deps),
        LinkedInPipeline(client, settings.linkedin_api_key, *deps),
        ZoomInfoPipeline(client, settings.zoominfo_api_key, *deps),
        PhantomBusterPipeline(
            client, settings.phantombuster_api_key, *deps,
            agent_id=settings.phantombuster_agent_id,
        ),
    ]


def _status_icon(available: bool) -> str:
    return "on" if available else "off"


class DeepSearchService:
    """Runs every provider pipeline concurrently and merges the contacts."""

    def __init__(self, pipelines: list[ProviderPipeline], provider_timeout: float = 60.0):
        self._pipelines = list(pipelines)
        self._timeout = provider_timeout or None

    @property
    def pipelines(self) -> list[ProviderPipeline]:
        return list(self._pipelines)

    def get_pipeline(self, key: str) -> ProviderPipeline:
        wanted = key.strip().lower()
        for pipeline in self._pipelines:
            if pipeline.key == wanted:
                return pipeline
        raise UnknownProviderError(key)

    def status(self) -> ProviderStatus:
        """Credential presence per provider. No network."""
        return ProviderStatus(**{p.key: p.has_credentials for p in self._pipelines})

    async def run(self, query: str, country_code: str = "ZA") -> DeepSearchResult:
        logger.info("Deep search for %r in %s", query, country_code)
        status_line = " ".join(
            f"{p.name}={_status_icon(p.has_credentials)}" for p in self._pipelines
        )
        logs = [f"[DeepSearch] Pipeline status: {status_line}"]

        gather_results = await asyncio.gather(
            *(self._run_pipeline(p, query, country_code) for p in self._pipelines),
            return_exceptions=True,
        )

        pipeline_results: dict[str, PipelineResult] = {}
        all_contacts: list[Contact] = []
        apis_used: list[str] = []
        apis_unavailable: list[str] = []

        for pipeline, res in zip(self._pipelines, gather_results):
            if isinstance(res, BaseException):
                logger.warning("%s pipeline failed: %s", pipeline.name, res)
                res = self._failed_result(pipeline, f"Pipeline failed: {res!r}")

            pipeline_results[pipeline.name] = res
            all_contacts.extend(res.contacts)
            logs.extend(res.logs)
            if res.api_used:
                apis_used.append(pipeline.name)
            else:
                apis_unavailable.append(pipeline.name)

        contacts = rank_contacts(dedup_contacts(all_contacts))
        logs.append(
            f"[DeepSearch] Total: {len(contacts)} unique contacts "
            f"(from {len(all_contacts)} raw results)"
        )
        logger.info(
            "Deep search for %r: %d unique contacts, APIs used: %s",
            query, len(contacts), ", ".join(apis_used) or "none",
        )

        return DeepSearchResult(
            contacts=contacts,
            pipeline_results=pipeline_results,
            logs=logs,
            total=len(contacts),
            apis_used=apis_used,
            apis_unavailable=apis_unavailable,
        )

    async def _run_pipeline(
        self, pipeline: ProviderPipeline, query: str, country_code: str,
    ) -> PipelineResult:
        try:
            return await asyncio.wait_for(pipeline.search(query, country_code), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("%s pipeline timed out after %ss", pipeline.name, self._timeout)
            return self._failed_result(pipeline, f"Pipeline timed out after {self._timeout}s")

    @staticmethod
    def _failed_result(pipeline: ProviderPipeline, reason: str) -> PipelineResult:
        return PipelineResult.build([], pipeline.fallback_source, False, [f"[{pipeline.name}] {reason}"])
