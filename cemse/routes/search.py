"""Search endpoints -- global search, suggestions, popular searches."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from cemse.auth import require
from cemse.database import Gateway, get_gateway
from cemse.errors import ApiError
from cemse.schemas import SessionUser
from cemse.services.filters import normalize_limit, normalize_search_filters
from cemse.services.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])


def get_search_service(gateway: Gateway = Depends(get_gateway)) -> SearchService:
    return SearchService(gateway)


@router.get("")
async def global_search(
    request: Request,
    session: SessionUser = Depends(require("search")),
    service: SearchService = Depends(get_search_service),
):
    """
    Search jobs, companies, people and courses with one query.
    Queries shorter than the minimum length return no results.
    """
    query, filters = normalize_search_filters(request.query_params)
    try:
        outcome = await service.global_search(query, filters)
    except ApiError:
        raise
    except Exception:
        logger.exception("Global search failed for user %s", session.id)
        raise ApiError("Failed to perform search")

    body = {
        "success": True,
        "results": [r.model_dump(mode="json") for r in outcome.results],
        "total": outcome.total,
        "query": query,
        "filters": filters.echo(),
    }
    if outcome.failed_sources:
        body["failedSources"] = outcome.failed_sources
    return body


@router.get("/suggestions")
async def search_suggestions(
    request: Request,
    session: SessionUser = Depends(require("search")),
    service: SearchService = Depends(get_search_service),
):
    limit = normalize_limit(request.query_params, default=5)
    try:
        suggestions = await service.suggestions(request.query_params.get("q", ""), limit)
    except Exception:
        logger.exception("Search suggestions failed")
        raise ApiError("Failed to fetch suggestions")
    return {"success": True, "suggestions": suggestions}


@router.get("/popular")
async def popular_searches(
    request: Request,
    session: SessionUser = Depends(require("search")),
    service: SearchService = Depends(get_search_service),
):
    limit = normalize_limit(request.query_params, default=10)
    try:
        searches = await service.popular_searches(limit)
    except Exception:
        logger.exception("Popular searches failed")
        raise ApiError("Failed to fetch popular searches")
    return {"success": True, "searches": searches}
