"""
Startup discovery -- faceted filtering, trending, recommendations, analytics.

Pipeline for a discovery request:
    DiscoveryFilter -> predicates (query_builder) -> page + count queries
    (same predicates) -> shaped items + facet counts.

Trending and recommendations fetch a bounded candidate pool from the
database and re-rank it in memory (ranking module).
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload

from cemse import config
from cemse.database import Gateway
from cemse.models import Entrepreneurship, Profile, User
from cemse.schemas import DiscoveryFilter, DiscoveryPage, SessionUser
from cemse.services import ranking
from cemse.services.query_builder import (
    build_startup_conditions,
    build_startup_order_by,
    contains,
    startup_text_clause,
    visibility_conditions,
)
from cemse.services.shaping import shape_startup

logger = logging.getLogger(__name__)

E = Entrepreneurship

# Owner + owner profile are rendered in every shaped startup
_WITH_OWNER = selectinload(E.owner).selectinload(User.profile)


def _candidate_pool(limit: int) -> int:
    return max(limit * 5, 50)


class StartupDiscoveryService:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    # ------------------------------------------------------------------
    # Faceted discovery
    # ------------------------------------------------------------------

    async def discover(
        self,
        f: DiscoveryFilter,
        requester: Optional[SessionUser] = None,
        include_facets: bool = True,
    ) -> DiscoveryPage:
        conditions = build_startup_conditions(f, requester)

        page_stmt = (
            select(E)
            .options(_WITH_OWNER)
            .where(*conditions)
            .order_by(*build_startup_order_by(f))
            .offset(f.offset)
            .limit(f.limit)
        )
        count_stmt = select(func.count()).select_from(E).where(*conditions)

        lookups = [self.gateway.all(page_stmt), self.gateway.scalar(count_stmt)]
        if include_facets:
            lookups.append(self.facets())
        results = await asyncio.gather(*lookups)

        startups, total = results[0], results[1] or 0
        logger.debug(
            "Discovery returned %s/%s startups (limit=%s offset=%s)",
            len(startups), total, f.limit, f.offset,
        )
        return DiscoveryPage(
            items=[shape_startup(s) for s in startups],
            total=total,
            limit=f.limit,
            offset=f.offset,
            facets=results[2] if include_facets else {},
        )

    async def facets(self) -> dict:
        categories, stages, municipalities, departments = await asyncio.gather(
            self._group_counts(E.category),
            self._group_counts(E.business_stage),
            self._group_counts(E.municipality),
            self._group_counts(E.department),
        )
        return {
            "categories": categories,
            "businessStages": [dict(s, value=s["name"]) for s in stages],
            "municipalities": municipalities,
            "departments": departments,
        }

    async def _group_counts(self, column) -> list[dict]:
        count = func.count(E.id)
        stmt = (
            select(column, count)
            .where(*visibility_conditions(True, None))
            .group_by(column)
            .order_by(count.desc(), column.asc())
        )
        rows = await self.gateway.rows(stmt)
        return [{"name": name, "count": n} for name, n in rows]

    # ------------------------------------------------------------------
    # Trending & recommendations
    # ------------------------------------------------------------------

    async def trending(self, limit: int = 10, now: dt.datetime = None) -> list[dict]:
        """Recently active public startups ranked by trend score."""
        now = now or ranking.utcnow()
        since = now - dt.timedelta(days=config.TRENDING_WINDOW_DAYS)
        stmt = (
            select(E)
            .options(_WITH_OWNER)
            .where(
                *visibility_conditions(True, None),
                E.views_count > 0,
                or_(E.created_at >= since, E.updated_at >= since),
            )
            .order_by(E.views_count.desc(), E.created_at.desc())
            .limit(_candidate_pool(limit))
        )
        candidates = await self.gateway.all(stmt)
        ranked = ranking.rank_by_score(candidates, lambda s: ranking.trend_score(s, now=now))
        return [shape_startup(s, trendScore=score) for s, score in ranked[:limit]]

    async def recommendations(self, user_id: str, limit: int = 10) -> list[dict]:
        """Startups matching the user's interests and skills."""
        profiles = await self.gateway.all(select(Profile).where(Profile.user_id == user_id))
        if not profiles:
            return []
        profile = profiles[0]

        skills = list(dict.fromkeys((profile.skills or []) + (profile.relevant_skills or [])))
        interests = list(profile.interests or [])

        conditions = visibility_conditions(True, None) + [E.owner_id != user_id]
        matchers = []
        if interests:
            matchers += [E.category.in_(interests), E.subcategory.in_(interests)]
        for skill in skills:
            matchers += [contains(E.name, skill), contains(E.description, skill)]
        if matchers:
            conditions.append(or_(*matchers))

        stmt = (
            select(E)
            .options(_WITH_OWNER)
            .where(*conditions)
            .order_by(E.rating.desc().nullslast(), E.views_count.desc(), E.created_at.desc())
            .limit(_candidate_pool(limit))
        )
        candidates = await self.gateway.all(stmt)
        ranked = ranking.rank_by_score(
            candidates, lambda s: ranking.recommendation_score(s, skills, interests)
        )
        return [
            shape_startup(
                s,
                recommendationScore=score,
                recommendationReason=ranking.recommendation_reason(s, interests),
            )
            for s, score in ranked[:limit]
        ]

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    async def analytics(self, now: dt.datetime = None) -> dict:
        now = now or ranking.utcnow()
        recent_since = now - dt.timedelta(days=config.RECENT_ACTIVITY_DAYS)
        public = visibility_conditions(True, None)

        total, categories, stages, locations, departments, recent = await asyncio.gather(
            self.gateway.scalar(select(func.count()).select_from(E).where(*public)),
            self._group_counts(E.category),
            self._group_counts(E.business_stage),
            self._group_counts(E.municipality),
            self._group_counts(E.department),
            self.gateway.scalar(
                select(func.count()).select_from(E).where(*public, E.created_at >= recent_since)
            ),
        )
        return {
            "totalStartups": total or 0,
            "categoryStats": categories,
            "stageStats": [dict(s, value=s["name"]) for s in stages],
            "locationStats": locations,
            "departmentStats": departments,
            "recentActivity": recent or 0,
        }

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def _listing(self, conditions: list, limit: int) -> list:
        stmt = (
            select(E)
            .options(_WITH_OWNER)
            .where(*visibility_conditions(True, None), *conditions)
            .order_by(E.rating.desc().nullslast(), E.views_count.desc(), E.id.asc())
            .limit(limit)
        )
        return await self.gateway.all(stmt)

    async def search_startups(self, query: str, limit: int = 20) -> list[dict]:
        startups = await self._listing([startup_text_clause(query, extended=True)], limit)
        return [
            shape_startup(s, searchScore=ranking.startup_search_score(s, query))
            for s in startups
        ]

    async def by_category(self, category: str, limit: int = 20) -> list[dict]:
        return [shape_startup(s) for s in await self._listing([E.category == category], limit)]

    async def by_stage(self, stage: str, limit: int = 20) -> list[dict]:
        return [shape_startup(s) for s in await self._listing([E.business_stage == stage], limit)]

    async def by_location(
        self,
        municipality: Optional[str] = None,
        department: Optional[str] = None,
        limit: int = 20,
    ) -> list[dict]:
        conditions = []
        if municipality:
            conditions.append(E.municipality == municipality)
        if department:
            conditions.append(E.department == department)
        return [shape_startup(s) for s in await self._listing(conditions, limit)]
