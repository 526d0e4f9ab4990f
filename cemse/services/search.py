"""
Global search across job offers, companies, people and courses.

Each entity type is looked up concurrently with its own session, bounded by
the page size, tagged with its type and concatenated in type-priority
order. Results carry a relevance score from a pluggable scorer; with
SEARCH_RANKING=relevance the merged list is re-sorted by that score.

A lookup failure fails the whole request unless SEARCH_FAILURE_POLICY is
``partial``, in which case the failing sources are reported instead.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from cemse import config
from cemse.database import Gateway
from cemse.models import Company, Course, JobOffer, Profile, User
from cemse.schemas import SEARCH_TYPES, SearchFilters, SearchOutcome, SearchResult
from cemse.services.query_builder import (
    build_company_conditions,
    build_course_conditions,
    build_job_conditions,
    build_person_conditions,
    contains,
    json_text_contains,
)
from cemse.services.ranking import RelevanceScorer, relevance_score
from cemse.services.shaping import (
    full_name,
    shape_company,
    shape_course,
    shape_job,
    shape_person,
)

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(
        self,
        gateway: Gateway,
        scorer: RelevanceScorer = relevance_score,
        ranking: str = None,
        failure_policy: str = None,
        min_query_length: int = None,
    ):
        self.gateway = gateway
        self.scorer = scorer
        self.ranking = ranking or config.SEARCH_RANKING
        self.failure_policy = failure_policy or config.SEARCH_FAILURE_POLICY
        self.min_query_length = (
            config.SEARCH_MIN_QUERY_LENGTH if min_query_length is None else min_query_length
        )
        self._lookups = {
            "job": self._search_jobs,
            "company": self._search_companies,
            "person": self._search_people,
            "course": self._search_courses,
        }

    def _too_short(self, query: Optional[str]) -> bool:
        return len((query or "").strip()) < self.min_query_length

    # ------------------------------------------------------------------
    # Global search
    # ------------------------------------------------------------------

    async def global_search(self, query: str, filters: SearchFilters) -> SearchOutcome:
        query = (query or "").strip()
        if self._too_short(query):
            return SearchOutcome()

        types = [t for t in SEARCH_TYPES if t in filters.types]
        gathered = await asyncio.gather(
            *[self._lookups[t](query, filters) for t in types],
            return_exceptions=True,
        )

        results: list[SearchResult] = []
        failed: list[str] = []
        for source, outcome in zip(types, gathered):
            if isinstance(outcome, BaseException):
                if self.failure_policy != "partial" or not isinstance(outcome, Exception):
                    raise outcome
                logger.warning("Search source %s failed: %s", source, outcome)
                failed.append(source)
                continue
            results.extend(outcome)

        if self.ranking == "relevance":
            # sort() is stable: type priority still orders equal scores
            results.sort(key=lambda r: r.score, reverse=True)

        logger.info(
            "Search %r matched %s results across %s (failed: %s)",
            query, len(results), ",".join(types), ",".join(failed) or "-",
        )
        return SearchOutcome(
            results=results[: filters.limit],
            total=len(results),
            failed_sources=failed,
        )

    async def _search_jobs(self, query: str, f: SearchFilters) -> list[SearchResult]:
        stmt = (
            select(JobOffer)
            .options(selectinload(JobOffer.company))
            .where(*build_job_conditions(query, f))
            .order_by(JobOffer.featured.desc(), JobOffer.created_at.desc(), JobOffer.id.asc())
            .offset(f.offset)
            .limit(f.limit)
        )
        jobs = await self.gateway.all(stmt)
        return [
            SearchResult(
                id=job.id,
                type="job",
                title=job.title,
                subtitle=job.company.name if job.company else "",
                url=f"/jobs/{job.id}",
                score=self.scorer(query, job.title, job.description or ""),
                metadata=shape_job(job),
            )
            for job in jobs
        ]

    async def _search_companies(self, query: str, f: SearchFilters) -> list[SearchResult]:
        stmt = (
            select(Company)
            .where(*build_company_conditions(query, f))
            .order_by(Company.name.asc(), Company.id.asc())
            .offset(f.offset)
            .limit(f.limit)
        )
        companies = await self.gateway.all(stmt)
        return [
            SearchResult(
                id=company.id,
                type="company",
                title=company.name,
                subtitle=company.business_sector or "",
                url=f"/companies/{company.id}",
                score=self.scorer(query, company.name, company.description or ""),
                metadata=shape_company(company),
            )
            for company in companies
        ]

    async def _search_people(self, query: str, f: SearchFilters) -> list[SearchResult]:
        stmt = (
            select(Profile)
            .join(User, Profile.user_id == User.id)
            .where(*build_person_conditions(query, f))
            .order_by(Profile.last_name.asc(), Profile.first_name.asc(), Profile.id.asc())
            .offset(f.offset)
            .limit(f.limit)
        )
        profiles = await self.gateway.all(stmt)
        return [
            SearchResult(
                id=profile.user_id,
                type="person",
                title=full_name(profile),
                subtitle=profile.job_title or "",
                url=f"/profiles/{profile.user_id}",
                score=self.scorer(query, full_name(profile), profile.professional_summary or ""),
                metadata=shape_person(profile),
            )
            for profile in profiles
        ]

    async def _search_courses(self, query: str, f: SearchFilters) -> list[SearchResult]:
        stmt = (
            select(Course)
            .where(*build_course_conditions(query, f))
            .order_by(Course.created_at.desc(), Course.id.asc())
            .offset(f.offset)
            .limit(f.limit)
        )
        courses = await self.gateway.all(stmt)
        return [
            SearchResult(
                id=course.id,
                type="course",
                title=course.title,
                subtitle=course.institution_name or "",
                url=f"/courses/{course.id}",
                score=self.scorer(query, course.title, course.description or ""),
                metadata=shape_course(course),
            )
            for course in courses
        ]

    # ------------------------------------------------------------------
    # Suggestions & popular searches
    # ------------------------------------------------------------------

    async def suggestions(self, query: str, limit: int = 5) -> list[str]:
        """Job titles, company names and skills containing ``query``."""
        query = (query or "").strip()
        if self._too_short(query):
            return []

        titles, names, skill_lists = await asyncio.gather(
            self.gateway.all(
                select(JobOffer.title)
                .where(JobOffer.is_active.is_(True), contains(JobOffer.title, query))
                .limit(limit)
            ),
            self.gateway.all(
                select(Company.name)
                .where(Company.is_active.is_(True), contains(Company.name, query))
                .limit(limit)
            ),
            self.gateway.all(
                select(Profile.relevant_skills)
                .where(json_text_contains(Profile.relevant_skills, query))
                .limit(limit * 2)
            ),
        )

        suggestions = list(titles) + list(names)
        needle = query.lower()
        for skills in skill_lists:
            suggestions.extend(s for s in (skills or []) if needle in s.lower())

        # ordered de-duplication
        return list(dict.fromkeys(suggestions))[:limit]

    async def popular_searches(self, limit: int = 10) -> list[str]:
        """Most common active job titles, topped up with the configured defaults."""
        count = func.count(JobOffer.id)
        rows = await self.gateway.rows(
            select(JobOffer.title, count)
            .where(JobOffer.is_active.is_(True))
            .group_by(JobOffer.title)
            .having(count > 1)
            .order_by(count.desc(), JobOffer.title.asc())
            .limit(limit)
        )
        searches = [title for title, _ in rows]
        seen = {s.lower() for s in searches}
        for term in config.POPULAR_SEARCHES:
            if len(searches) >= limit:
                break
            if term.lower() not in seen:
                searches.append(term)
                seen.add(term.lower())
        return searches[:limit]
