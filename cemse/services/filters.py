"""
Turns raw query-string parameters into typed filters.

Query values always arrive as strings. Optional constraints are kept only
when the parameter is non-empty and well-formed; malformed ones are
dropped (or rejected with 400 when STRICT_FILTERS is on). Pagination
always ends up valid: bad ``limit`` / ``offset`` fall back to defaults.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Mapping, Optional

from cemse import config
from cemse.errors import ValidationError
from cemse.schemas import SEARCH_TYPES, DiscoveryFilter, SearchFilters
from cemse.services.query_builder import STARTUP_SORT_FIELDS

logger = logging.getLogger(__name__)

TYPE_ALIASES = {"youth": "person", "profile": "person", "jobs": "job"}
_INT_RE = re.compile(r"-?\d+", re.ASCII)


def _text(params: Mapping[str, str], key: str) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _malformed(key: str, value: str, strict: bool, expected: str) -> None:
    if strict:
        raise ValidationError(f"Invalid value for '{key}': expected {expected}")
    logger.debug("Dropping malformed filter %s=%r", key, value)


def parse_int(value: Optional[str]) -> Optional[int]:
    """Strict integer parse; None for anything that is not a whole number."""
    if value is None:
        return None
    value = str(value).strip()
    # int() alone would also take "1_000", "+5" and non-ASCII digits
    if not _INT_RE.fullmatch(value):
        return None
    return int(value)


def parse_date(value: Optional[str]) -> Optional[dt.date]:
    """Parse ``YYYY-MM-DD`` or an ISO datetime into a date."""
    if value is None:
        return None
    value = str(value).strip()
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _int_param(params, key, strict) -> Optional[int]:
    raw = _text(params, key)
    if raw is None:
        return None
    value = parse_int(raw)
    if value is None:
        _malformed(key, raw, strict, "an integer")
    return value


def _date_param(params, key, strict) -> Optional[dt.date]:
    raw = _text(params, key)
    if raw is None:
        return None
    value = parse_date(raw)
    if value is None:
        _malformed(key, raw, strict, "a date (YYYY-MM-DD)")
    return value


def normalize_limit(
    params: Mapping[str, str],
    default: int = None,
    strict: bool = None,
) -> int:
    """Page size: positive integer capped at MAX_PAGE_SIZE, else the default."""
    strict = config.STRICT_FILTERS if strict is None else strict
    default = default or config.DEFAULT_PAGE_SIZE
    raw = _text(params, "limit")
    if raw is None:
        return default
    value = parse_int(raw)
    if value is None or value <= 0:
        _malformed("limit", raw, strict, "a positive integer")
        return default
    return min(value, config.MAX_PAGE_SIZE)


def normalize_offset(params: Mapping[str, str], strict: bool = None) -> int:
    strict = config.STRICT_FILTERS if strict is None else strict
    raw = _text(params, "offset")
    if raw is None:
        return 0
    value = parse_int(raw)
    if value is None or value < 0:
        _malformed("offset", raw, strict, "a non-negative integer")
        return 0
    return value


# ---------------------------------------------------------------------------
# Startup discovery
# ---------------------------------------------------------------------------

def normalize_discovery_filters(
    params: Mapping[str, str],
    strict: bool = None,
) -> DiscoveryFilter:
    """Build a DiscoveryFilter from raw query parameters."""
    strict = config.STRICT_FILTERS if strict is None else strict

    sort_by = _text(params, "sortBy") or "createdAt"
    if sort_by not in STARTUP_SORT_FIELDS:
        _malformed("sortBy", sort_by, strict, "one of " + ", ".join(sorted(STARTUP_SORT_FIELDS)))
        sort_by = "createdAt"

    sort_order = (_text(params, "sortOrder") or "desc").lower()
    if sort_order not in ("asc", "desc"):
        _malformed("sortOrder", sort_order, strict, "'asc' or 'desc'")
        sort_order = "desc"

    return DiscoveryFilter(
        search=_text(params, "search"),
        category=_text(params, "category"),
        subcategory=_text(params, "subcategory"),
        business_stage=_text(params, "businessStage"),
        municipality=_text(params, "municipality"),
        department=_text(params, "department"),
        min_employees=_int_param(params, "minEmployees", strict),
        max_employees=_int_param(params, "maxEmployees", strict),
        min_revenue=_int_param(params, "minRevenue", strict),
        max_revenue=_int_param(params, "maxRevenue", strict),
        founded_after=_date_param(params, "foundedAfter", strict),
        founded_before=_date_param(params, "foundedBefore", strict),
        has_website=params.get("hasWebsite") == "true",
        has_social_media=params.get("hasSocialMedia") == "true",
        is_public=params.get("isPublic") != "false",
        sort_by=sort_by,
        sort_order=sort_order,
        limit=normalize_limit(params, strict=strict),
        offset=normalize_offset(params, strict=strict),
    )


# ---------------------------------------------------------------------------
# Global search
# ---------------------------------------------------------------------------

def _split_list(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


def _search_types(params, strict) -> list[str]:
    raw = _text(params, "type")
    if raw is None or raw.lower() == "all":
        return list(SEARCH_TYPES)
    types = []
    for item in _split_list(raw.lower()):
        item = TYPE_ALIASES.get(item, item)
        if item not in SEARCH_TYPES:
            _malformed("type", item, strict, "one of " + ", ".join(SEARCH_TYPES))
            continue
        if item not in types:
            types.append(item)
    # Keep type-priority order regardless of how the client listed them
    return [t for t in SEARCH_TYPES if t in types] or list(SEARCH_TYPES)


def normalize_search_filters(
    params: Mapping[str, str],
    strict: bool = None,
) -> tuple[str, SearchFilters]:
    """Return the stripped query text and the typed search filters."""
    strict = config.STRICT_FILTERS if strict is None else strict
    query = _text(params, "q") or ""
    filters = SearchFilters(
        types=_search_types(params, strict),
        location=_text(params, "location"),
        category=_text(params, "category"),
        skills=_split_list(_text(params, "skills")),
        experience=_text(params, "experience"),
        salary_min=_int_param(params, "salaryMin", strict),
        salary_max=_int_param(params, "salaryMax", strict),
        limit=normalize_limit(params, strict=strict),
        offset=normalize_offset(params, strict=strict),
    )
    return query, filters
