"""Competitor resolution route."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from ..schemas.competitor_schema import CompetitorResolveRequest, CompetitorResolveResponse
from ..services.competitor_resolver import find_competitors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/competitors", tags=["Competitors"])


@router.post(
    "/resolve",
    response_model=CompetitorResolveResponse,
    summary="Resolve a ranked competitor list",
)
async def resolve(request: CompetitorResolveRequest) -> CompetitorResolveResponse:
    print(f"➡️  [COMPETITORS] /competitors/resolve for \"{request.snapshot.business_name}\"")
    logger.info("Resolving competitors: %d website mention(s), llm_sources=%s", len(request.website_mentions), request.include_llm_sources)
    competitors = await find_competitors(
        request.snapshot,
        website_mentions=request.website_mentions,
        include_llm_sources=request.include_llm_sources,
    )
    return CompetitorResolveResponse(competitors=competitors, count=len(competitors))
