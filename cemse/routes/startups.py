"""Startup discovery endpoints -- faceted discovery, trending, recommendations, analytics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from cemse.auth import require
from cemse.database import Gateway, get_gateway
from cemse.errors import ApiError, ValidationError
from cemse.models import BUSINESS_STAGES
from cemse.schemas import SessionUser
from cemse.services.discovery import StartupDiscoveryService
from cemse.services.filters import normalize_discovery_filters, normalize_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/startups", tags=["startups"])


def get_discovery_service(gateway: Gateway = Depends(get_gateway)) -> StartupDiscoveryService:
    return StartupDiscoveryService(gateway)


@router.get("/discover")
async def discover_startups(
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    """
    Faceted startup discovery.
    Pipeline: query params -> DiscoveryFilter -> page + count (same predicates) -> facets.
    """
    filters = normalize_discovery_filters(request.query_params)
    try:
        page = await service.discover(filters, requester=session)
    except ApiError:
        raise
    except Exception:
        logger.exception("Startup discovery failed")
        raise ApiError("Failed to discover startups")

    return {"success": True, **page.model_dump(mode="json")}


@router.get("/recommendations")
async def recommended_startups(
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    limit = normalize_limit(request.query_params, default=10)
    try:
        startups = await service.recommendations(session.id, limit)
    except Exception:
        logger.exception("Startup recommendations failed for user %s", session.id)
        raise ApiError("Failed to fetch recommendations")
    return {"success": True, "startups": startups, "limit": limit}


@router.get("/trending")
async def trending_startups(
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    limit = normalize_limit(request.query_params, default=10)
    try:
        startups = await service.trending(limit)
    except Exception:
        logger.exception("Trending startups failed")
        raise ApiError("Failed to fetch trending startups")
    return {"success": True, "startups": startups, "limit": limit}


@router.get("/analytics")
async def discovery_analytics(
    session: SessionUser = Depends(require("view_startup_analytics")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    try:
        analytics = await service.analytics()
    except Exception:
        logger.exception("Discovery analytics failed")
        raise ApiError("Failed to fetch analytics")
    return {"success": True, "analytics": analytics}


@router.get("/search")
async def search_startups(
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    query = (request.query_params.get("q") or "").strip()
    if not query:
        raise ValidationError("Query parameter 'q' is required")
    limit = normalize_limit(request.query_params)
    try:
        startups = await service.search_startups(query, limit)
    except Exception:
        logger.exception("Startup search failed")
        raise ApiError("Failed to search startups")
    return {"success": True, "startups": startups, "query": query}


@router.get("/by-category/{category}")
async def startups_by_category(
    category: str,
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    limit = normalize_limit(request.query_params)
    try:
        startups = await service.by_category(category, limit)
    except Exception:
        logger.exception("Startups by category failed")
        raise ApiError("Failed to fetch startups")
    return {"success": True, "startups": startups}


@router.get("/by-stage/{stage}")
async def startups_by_stage(
    stage: str,
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    stage = stage.upper()
    if stage not in BUSINESS_STAGES:
        raise ValidationError(f"Unknown business stage '{stage}'")
    limit = normalize_limit(request.query_params)
    try:
        startups = await service.by_stage(stage, limit)
    except Exception:
        logger.exception("Startups by stage failed")
        raise ApiError("Failed to fetch startups")
    return {"success": True, "startups": startups}


@router.get("/by-location")
async def startups_by_location(
    request: Request,
    session: SessionUser = Depends(require("discover_startups")),
    service: StartupDiscoveryService = Depends(get_discovery_service),
):
    params = request.query_params
    municipality = (params.get("municipality") or "").strip() or None
    department = (params.get("department") or "").strip() or None
    if not municipality and not department:
        raise ValidationError("Provide 'municipality' or 'department'")
    limit = normalize_limit(params)
    try:
        startups = await service.by_location(municipality, department, limit)
    except Exception:
        logger.exception("Startups by location failed")
        raise ApiError("Failed to fetch startups")
    return {"success": True, "startups": startups}
