from fastapi import APIRouter

from app.dependencies import DeepSearchDep
from app.schemas.contact import PipelineResult, ProviderStatus
from app.schemas.responses import ProviderSearchRequest

router = APIRouter(prefix="/providers")


@router.get("/status", response_model=ProviderStatus)
async def provider_status(service: DeepSearchDep) -> ProviderStatus:
    return service.status()


@router.post("/{provider}/search", response_model=PipelineResult)
async def provider_search(
    provider: str,
    request: ProviderSearchRequest,
    service: DeepSearchDep,
) -> PipelineResult:
    pipeline = service.get_pipeline(provider)
    return await pipeline.search(request.query, request.country_code)
