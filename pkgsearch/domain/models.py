from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class PackageRecord(BaseModel):
    """A single row of the packages table."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str


class SearchResponse(BaseModel):
    results: List[PackageRecord] = Field(
        default_factory=list,
        description="Matches ordered by rank (exact, prefix, substring), then name.",
    )


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
