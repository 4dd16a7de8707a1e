from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Confidence(StrEnum):
    high = "high"
    medium = "medium"
    low = "low"

    @property
    def rank(self) -> int:
        """Sort rank, lower = more trusted."""
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.high: 0, Confidence.medium: 1, Confidence.low: 2}


class Contact(BaseModel):
    name: str
    email: str | None = None
    title: str | None = None
    company: str | None = None
    url: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    instagram: str | None = None
    twitter: str | None = None
    tiktok: str | None = None
    followers: str | None = None
    source: str
    confidence: Confidence = Confidence.low


class PipelineResult(BaseModel):
    contacts: list[Contact] = []
    source: str
    api_used: bool = False
    logs: list[str] = []
    total: int = 0

    @classmethod
    def build(
        cls,
        contacts: list[Contact],
        source: str,
        api_used: bool,
        logs: list[str],
    ) -> PipelineResult:
        return cls(
            contacts=contacts,
            source=source,
            api_used=api_used,
            logs=logs,
            total=len(contacts),
        )


class ProviderStatus(BaseModel):
    apollo: bool = False
    linkedin: bool = False
    zoominfo: bool = False
    phantombuster: bool = False


class DeepSearchResult(BaseModel):
    contacts: list[Contact] = []
    pipeline_results: dict[str, PipelineResult] = {}
    logs: list[str] = []
    total: int = 0
    apis_used: list[str] = []
    apis_unavailable: list[str] = []
