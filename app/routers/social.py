from fastapi import APIRouter

from app.dependencies import SocialSearchDep
from app.schemas.responses import SocialSearchRequest
from app.schemas.social import SocialProfile
from app.services.social_search import flatten

router = APIRouter()


@router.post("/social-search", response_model=dict[str, list[SocialProfile]])
async def social_search(
    request: SocialSearchRequest,
    service: SocialSearchDep,
) -> dict[str, list[SocialProfile]]:
    results = await service.search_all_platforms(
        request.query, request.country_code, request.platforms,
    )
    return {str(platform): profiles for platform, profiles in results.items()}


@router.post("/social-search/flat", response_model=list[SocialProfile])
async def social_search_flat(
    request: SocialSearchRequest,
    service: SocialSearchDep,
) -> list[SocialProfile]:
    """Same search as /social-search, as one list in platform order."""
    results = await service.search_all_platforms(
        request.query, request.country_code, request.platforms,
    )
    return flatten(results)
