"""
Tests for the in-memory scoring passes.
"""

import datetime as dt
from types import SimpleNamespace

from cemse.services.ranking import (
    rank_by_score,
    recommendation_reason,
    recommendation_score,
    relevance_score,
    startup_search_score,
    trend_score,
)

NOW = dt.datetime(2026, 10, 1, 12, 0, 0)


def startup(**fields):
    defaults = {
        "name": "Café Andino",
        "description": "Tostado de café",
        "category": "FOOD",
        "subcategory": None,
        "views_count": 0,
        "rating": None,
        "created_at": NOW,
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


class TestRelevanceScore:
    def test_exact_title_match_is_capped(self):
        assert relevance_score("python", "Python", "") == 100

    def test_partial_title_match(self):
        score = relevance_score("python", "Desarrollador Python", "")
        assert 80 <= score <= 100

    def test_description_only_match(self):
        assert relevance_score("python", "Backend", "we use python daily") == 40

    def test_no_match(self):
        assert relevance_score("python", "Contador", "impuestos") == 0


class TestTrendScore:
    def test_components(self):
        s = startup(views_count=50, rating=5, created_at=NOW)
        # views 0.5*0.4 + recency 1*0.3 + rating 1*0.3
        assert trend_score(s, now=NOW, weights=[0.4, 0.3, 0.3]) == 0.8

    def test_views_are_capped(self):
        a = startup(views_count=100)
        b = startup(views_count=10_000)
        assert trend_score(a, now=NOW) == trend_score(b, now=NOW)

    def test_old_records_get_no_recency(self):
        s = startup(views_count=0, rating=None, created_at=NOW - dt.timedelta(days=90))
        assert trend_score(s, now=NOW) == 0


class TestRankByScore:
    def test_sorted_descending(self):
        items = [startup(name="a", views_count=1), startup(name="b", views_count=3)]
        ranked = rank_by_score(items, lambda s: s.views_count)
        assert [s.name for s, _ in ranked] == ["b", "a"]

    def test_ties_break_newer_first(self):
        older = startup(name="older", created_at=NOW - dt.timedelta(days=3))
        newer = startup(name="newer", created_at=NOW - dt.timedelta(days=1))
        ranked = rank_by_score([older, newer], lambda s: 1.0)
        assert [s.name for s, _ in ranked] == ["newer", "older"]


class TestRecommendationScore:
    def test_interest_and_skill_matches(self):
        s = startup(category="FOOD", subcategory="CAFE", description="café de especialidad")
        score = recommendation_score(s, skills=["café"], interests=["FOOD", "CAFE"])
        assert score == 10 + 5 + 3

    def test_rating_and_views(self):
        s = startup(rating=4, views_count=1000)
        assert recommendation_score(s, skills=[], interests=[]) == 8 + 5

    def test_capped_at_100(self):
        s = startup(rating=50, views_count=0)
        assert recommendation_score(s, [], []) == 100

    def test_reasons(self):
        assert recommendation_reason(startup(category="FOOD"), ["FOOD"]) == "Basado en tu interés en FOOD"
        assert recommendation_reason(startup(rating=4.5), []) == "Alta calificación y popular"
        assert recommendation_reason(startup(views_count=500), []) == "Muy popular entre los usuarios"
        assert recommendation_reason(startup(), []) == "Recomendado para ti"


def test_startup_search_score():
    s = startup(name="Tech Andina", category="TECH", description="software", subcategory="SaaS")
    assert startup_search_score(s, "tech") == 10 + 8
    assert startup_search_score(s, "saas") == 3
