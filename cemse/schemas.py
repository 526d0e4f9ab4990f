"""Pydantic schemas for request filters and response models."""

from __future__ import annotations

import datetime as dt
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from cemse import config


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

class SessionUser(BaseModel):
    """Caller identity forwarded by the identity provider."""

    id: str
    role: str = ""


# ---------------------------------------------------------------------------
# Startup discovery
# ---------------------------------------------------------------------------

class DiscoveryFilter(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    business_stage: Optional[str] = None
    municipality: Optional[str] = None
    department: Optional[str] = None
    min_employees: Optional[int] = None
    max_employees: Optional[int] = None
    min_revenue: Optional[int] = None
    max_revenue: Optional[int] = None
    founded_after: Optional[dt.date] = None
    founded_before: Optional[dt.date] = None
    has_website: bool = False
    has_social_media: bool = False
    is_public: bool = True
    sort_by: str = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(default=config.DEFAULT_PAGE_SIZE, gt=0)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _ordered_ranges(self):
        # A reversed range is read as the same interval, so min <= max always holds
        for lo, hi in (
            ("min_employees", "max_employees"),
            ("min_revenue", "max_revenue"),
            ("founded_after", "founded_before"),
        ):
            a, b = getattr(self, lo), getattr(self, hi)
            if a is not None and b is not None and a > b:
                setattr(self, lo, b)
                setattr(self, hi, a)
        return self

    def echo(self) -> dict:
        """Client-facing view of the constraints actually applied."""
        return self.model_dump(mode="json", exclude_none=True)


class DiscoveryPage(BaseModel):
    items: list[dict] = []
    total: int = 0
    limit: int
    offset: int
    facets: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Global search
# ---------------------------------------------------------------------------

SEARCH_TYPES = ("job", "company", "person", "course")


class SearchFilters(BaseModel):
    types: list[str] = Field(default_factory=lambda: list(SEARCH_TYPES))
    location: Optional[str] = None
    category: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    experience: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    limit: int = Field(default=config.DEFAULT_PAGE_SIZE, gt=0)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _ordered_salary(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            lo, hi = self.salary_max, self.salary_min
            self.salary_min = lo
            self.salary_max = hi
        return self

    def echo(self) -> dict:
        return {
            "type": self.types,
            "location": self.location,
            "category": self.category,
            "skills": self.skills,
            "experience": self.experience,
            "salaryMin": self.salary_min,
            "salaryMax": self.salary_max,
            "limit": self.limit,
            "offset": self.offset,
        }


class SearchResult(BaseModel):
    id: str
    type: Literal["job", "company", "person", "course"]
    title: str
    subtitle: str = ""
    url: str
    score: float = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchOutcome(BaseModel):
    results: list[SearchResult] = []
    total: int = 0
    failed_sources: list[str] = []
