"""
In-memory scoring passes applied after the database query.

Scores are plain functions so they can be swapped: global search takes any
``(query, title, description) -> float`` relevance scorer, and the startup
rankers take weights from configuration.
"""

from __future__ import annotations

import datetime as dt
from typing import Callable, Iterable, Optional

from cemse import config

RelevanceScorer = Callable[[str, str, str], float]


def utcnow() -> dt.datetime:
    # naive UTC, matching what the database stores
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def _created(item) -> dt.datetime:
    return getattr(item, "created_at", None) or dt.datetime.min


def rank_by_score(items: Iterable, score: Callable[[object], float]) -> list[tuple[object, float]]:
    """Score every item and sort best first; equal scores put newer records first."""
    scored = [(item, score(item)) for item in items]
    scored.sort(key=lambda pair: (pair[1], _created(pair[0])), reverse=True)
    return scored


# ---------------------------------------------------------------------------
# Global search relevance
# ---------------------------------------------------------------------------

def relevance_score(query: str, title: str, description: str) -> float:
    """Word-overlap relevance of a title/description pair, 0-100."""
    query_lower = (query or "").lower()
    title_lower = (title or "").lower()
    description_lower = (description or "").lower()

    score = 0
    if title_lower == query_lower:
        score += 100
    elif query_lower in title_lower:
        score += 80

    query_words = query_lower.split()
    title_words = title_lower.split()
    score += 20 * sum(1 for w in query_words if any(w in t for t in title_words))

    if query_lower and query_lower in description_lower:
        score += 30

    description_words = description_lower.split()
    score += 10 * sum(1 for w in query_words if any(w in d for d in description_words))

    return float(min(score, 100))


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

def trend_score(startup, now: Optional[dt.datetime] = None, weights: list = None) -> float:
    """Blend of views, recency and rating, each normalised to 0-1."""
    w_views, w_recency, w_rating = weights or config.TRENDING_WEIGHTS
    now = now or utcnow()
    window = dt.timedelta(days=config.TRENDING_WINDOW_DAYS)

    views = min((startup.views_count or 0) / 100, 1)
    age = now - _created(startup)
    recency = max(0.0, 1 - age / window)
    rating = (startup.rating or 0) / 5

    return round(views * w_views + recency * w_recency + rating * w_rating, 6)


def recommendation_score(startup, skills: list[str], interests: list[str]) -> float:
    score = 0.0
    if startup.category in interests:
        score += 10
    if startup.subcategory and startup.subcategory in interests:
        score += 5

    text = f"{startup.name} {startup.description or ''}".lower()
    score += 3 * sum(1 for skill in skills if skill.lower() in text)

    score += (startup.rating or 0) * 2
    score += min((startup.views_count or 0) / 100, 5)
    return min(score, 100.0)


def recommendation_reason(startup, interests: list[str]) -> str:
    if startup.category in interests:
        return f"Basado en tu interés en {startup.category}"
    if startup.rating and startup.rating > 4:
        return "Alta calificación y popular"
    if (startup.views_count or 0) > 100:
        return "Muy popular entre los usuarios"
    return "Recomendado para ti"


def startup_search_score(startup, query: str) -> float:
    q = query.lower()
    score = 0.0
    if q in (startup.name or "").lower():
        score += 10
    if q in (startup.category or "").lower():
        score += 8
    if q in (startup.description or "").lower():
        score += 5
    if q in (startup.subcategory or "").lower():
        score += 3
    return score
