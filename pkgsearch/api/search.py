from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from pkgsearch.core.config import Settings
from pkgsearch.core.dependencies import get_index_provider, get_settings
from pkgsearch.data.index_provider import IndexProvider
from pkgsearch.data.package_search import search_packages
from pkgsearch.domain.errors import ValidationError
from pkgsearch.domain.models import ErrorResponse, HealthResponse, SearchResponse

logger = logging.getLogger(__name__)
router = APIRouter()

# Routing is by path only; the method is not inspected.
ROUTED_METHODS = ["GET", "HEAD", "POST"]


@router.api_route("/", methods=ROUTED_METHODS, response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Lightweight health check endpoint. Never touches the index.
    """
    return HealthResponse(status="ok")


@router.api_route(
    "/search",
    methods=ROUTED_METHODS,
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(
    q: Optional[str] = Query(default=None, description="Substring to look for in package names."),
    provider: IndexProvider = Depends(get_index_provider),
    settings: Settings = Depends(get_settings),
) -> SearchResponse:
    """
    Ranked package name search: exact matches, then prefix matches, then
    substring matches, alphabetical within each tier, at most 50 rows.
    """
    # Checked before the index is touched so a bad request never triggers a fetch.
    if not q:
        raise ValidationError("missing query ?q=")

    index = await provider.get()
    results = await run_in_threadpool(
        search_packages,
        index,
        q,
        settings.escape_wildcards,
    )
    return SearchResponse(results=results)
