from typing import Annotated

from fastapi import Depends, Request

from app.jobs import JobStore
from app.services.deep_search import DeepSearchService
from app.services.social_search import SocialSearchService


def get_deep_search_service(request: Request) -> DeepSearchService:
    return request.app.state.deep_search_service


def get_social_search_service(request: Request) -> SocialSearchService:
    return request.app.state.social_search_service


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


DeepSearchDep = Annotated[DeepSearchService, Depends(get_deep_search_service)]
SocialSearchDep = Annotated[SocialSearchService, Depends(get_social_search_service)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
