from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.contact import DeepSearchResult
from app.schemas.social import DEFAULT_PLATFORMS


class DeepSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    country_code: str = "ZA"


class ProviderSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    country_code: str = "ZA"


class SocialSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    country_code: str = "ZA"
    # Unknown names are ignored by the service
    platforms: list[str] = [str(p) for p in DEFAULT_PLATFORMS]


class JobSubmittedResponse(BaseModel):
    job_id: str
    status: str
    message: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    created_at: datetime
    finished_at: datetime | None = None
    query: str | None = None
    country_code: str | None = None
    result: DeepSearchResult | None = None
    error: str | None = None
