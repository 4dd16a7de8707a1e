import asyncio
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from app.dependencies import DeepSearchDep, JobStoreDep
from app.jobs import JobStore
from app.schemas.responses import DeepSearchRequest, JobStatusResponse, JobSubmittedResponse
from app.services.deep_search import DeepSearchService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_deep_search(
    job_id: str,
    service: DeepSearchService,
    store: JobStore,
    query: str,
    country_code: str,
) -> None:
    store.mark_running(job_id)
    try:
        result = await service.run(query, country_code)
        store.mark_completed(job_id, result)
    except Exception as exc:
        logger.exception("Deep search job %s failed", job_id)
        store.mark_failed(job_id, str(exc))


@router.post("/deep-search", response_model=JobSubmittedResponse, status_code=202)
async def deep_search(
    request: DeepSearchRequest,
    service: DeepSearchDep,
    store: JobStoreDep,
) -> JobSubmittedResponse:
    existing = store.find_active_job(request.query, request.country_code)
    if existing:
        return JSONResponse(content={
            "job_id": existing.job_id,
            "status": "already_running",
            "message": "A deep search for this query is already running",
        })

    job = store.create_job(query=request.query, country_code=request.country_code)
    asyncio.create_task(
        _run_deep_search(job.job_id, service, store, request.query, request.country_code)
    )
    return JobSubmittedResponse(
        job_id=job.job_id,
        status=job.status,
        message="Deep search job submitted",
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, store: JobStoreDep) -> JobStatusResponse:
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse(**job.model_dump())
