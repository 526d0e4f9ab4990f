"""
Translates typed filters into SQLAlchemy predicates.

Every builder returns a list of boolean clauses meant to be AND-ed
together. The lists always start with the activity / visibility
predicates, so no caller can end up querying unfiltered records.
"""

from __future__ import annotations

import json
from typing import Optional

from sqlalchemy import String, and_, cast, false, func, or_

from cemse.auth import is_admin
from cemse.models import ROLE_YOUTH, Company, Course, Entrepreneurship, JobOffer, Profile, User
from cemse.schemas import DiscoveryFilter, SearchFilters, SessionUser

E = Entrepreneurship

# client field name -> sortable column
STARTUP_SORT_FIELDS = {
    "createdAt": E.created_at,
    "updatedAt": E.updated_at,
    "name": E.name,
    "category": E.category,
    "businessStage": E.business_stage,
    "employees": E.employees,
    "annualRevenue": E.annual_revenue,
    "founded": E.founded,
    "rating": E.rating,
    "viewsCount": E.views_count,
}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, term: str):
    """Case-insensitive substring match."""
    # SQLite only folds ASCII case, so the pattern is lowered here
    return column.ilike(f"%{escape_like(term.lower())}%", escape="\\")


def json_list_contains(column, value: str):
    """Case-insensitive membership test on a JSON list column.

    Compares against the serialised element (``"value"``) so it works the
    same on SQLite and PostgreSQL without JSON operators. Columns must be
    written with ``database.json_dumps`` so accented text is stored as-is.
    """
    needle = json.dumps(value.lower(), ensure_ascii=False)
    return cast(column, String).ilike(f"%{escape_like(needle)}%", escape="\\")


def any_of(column, values: list[str]):
    return or_(*[json_list_contains(column, v) for v in values])


def json_text_contains(column, term: str):
    """Substring match anywhere inside a serialised JSON column."""
    needle = json.dumps(term.lower(), ensure_ascii=False)[1:-1]
    return cast(column, String).ilike(f"%{escape_like(needle)}%", escape="\\")


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

def visibility_conditions(is_public: bool, requester: Optional[SessionUser]) -> list:
    """Activity + visibility predicates for startup queries."""
    conditions = [E.is_active.is_(True)]
    if is_admin(requester):
        conditions.append(E.is_public.is_(is_public))
    elif is_public:
        conditions.append(E.is_public.is_(True))
    else:
        # Private records are only visible to their owner
        conditions.append(E.is_public.is_(False))
        conditions.append(E.owner_id == requester.id if requester else false())
    return conditions


def startup_text_clause(term: str, extended: bool = False):
    columns = [E.name, E.description, E.category, E.subcategory]
    if extended:
        columns += [E.business_model, E.target_market]
    return or_(*[contains(c, term) for c in columns])


def build_startup_conditions(
    f: DiscoveryFilter,
    requester: Optional[SessionUser] = None,
) -> list:
    conditions = visibility_conditions(f.is_public, requester)

    if f.search:
        conditions.append(startup_text_clause(f.search))

    for value, column in (
        (f.category, E.category),
        (f.subcategory, E.subcategory),
        (f.business_stage, E.business_stage),
        (f.municipality, E.municipality),
        (f.department, E.department),
    ):
        if value is not None:
            conditions.append(column == value)

    for value, column, op in (
        (f.min_employees, E.employees, "ge"),
        (f.max_employees, E.employees, "le"),
        (f.min_revenue, E.annual_revenue, "ge"),
        (f.max_revenue, E.annual_revenue, "le"),
        (f.founded_after, E.founded, "ge"),
        (f.founded_before, E.founded, "le"),
    ):
        if value is not None:
            conditions.append(column >= value if op == "ge" else column <= value)

    if f.has_website:
        conditions.append(and_(E.website.isnot(None), E.website != ""))
    if f.has_social_media:
        conditions.append(E.social_media.isnot(None))

    return conditions


def build_startup_order_by(f: DiscoveryFilter) -> list:
    column = STARTUP_SORT_FIELDS.get(f.sort_by, E.created_at)
    ordered = column.asc() if f.sort_order == "asc" else column.desc()
    # Primary key tie-break keeps pages disjoint
    return [ordered, E.id.asc()]


# ---------------------------------------------------------------------------
# Global search
# ---------------------------------------------------------------------------

def build_job_conditions(query: str, f: SearchFilters) -> list:
    conditions = [
        JobOffer.is_active.is_(True),
        or_(
            contains(JobOffer.title, query),
            contains(JobOffer.description, query),
            contains(JobOffer.requirements, query),
            JobOffer.company.has(contains(Company.name, query)),
        ),
    ]
    if f.location:
        conditions.append(contains(JobOffer.location, f.location))
    if f.experience:
        conditions.append(JobOffer.experience_level == f.experience)
    if f.skills:
        conditions.append(any_of(JobOffer.skills_required, f.skills))
    if f.salary_min is not None:
        conditions.append(JobOffer.salary_min >= f.salary_min)
    if f.salary_max is not None:
        conditions.append(JobOffer.salary_max <= f.salary_max)
    return conditions


def build_company_conditions(query: str, f: SearchFilters) -> list:
    conditions = [
        Company.is_active.is_(True),
        or_(
            contains(Company.name, query),
            contains(Company.description, query),
            contains(Company.business_sector, query),
            contains(Company.website, query),
        ),
    ]
    if f.location:
        conditions.append(contains(Company.address, f.location))
    if f.category:
        conditions.append(contains(Company.business_sector, f.category))
    return conditions


def build_person_conditions(query: str, f: SearchFilters) -> list:
    """Predicates over Profile joined with User."""
    conditions = [
        User.role == ROLE_YOUTH,
        User.is_active.is_(True),
        or_(
            contains(Profile.first_name, query),
            contains(Profile.last_name, query),
            contains(Profile.job_title, query),
            contains(Profile.professional_summary, query),
            json_list_contains(Profile.relevant_skills, query),
        ),
    ]
    if f.location:
        conditions.append(contains(Profile.city, f.location))
    if f.skills:
        conditions.append(any_of(Profile.relevant_skills, f.skills))
    return conditions


def build_course_conditions(query: str, f: SearchFilters) -> list:
    conditions = [
        Course.is_active.is_(True),
        or_(contains(Course.title, query), contains(Course.description, query)),
    ]
    if f.skills:
        conditions.append(any_of(Course.tags, f.skills))
    if f.category:
        conditions.append(func.lower(Course.category) == f.category.lower())
    return conditions
