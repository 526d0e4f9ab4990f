"""
HTTP-level tests: status codes, error bodies and response shapes.
"""

import pytest

from cemse import config
from cemse.database import get_gateway
from cemse.services.ranking import utcnow

from conftest import auth_headers


class FailingGateway:
    async def all(self, stmt):
        raise RuntimeError("connection reset by peer at 10.0.0.5")

    async def rows(self, stmt):
        raise RuntimeError("connection reset by peer at 10.0.0.5")

    async def scalar(self, stmt):
        raise RuntimeError("connection reset by peer at 10.0.0.5")


@pytest.fixture
def failing_client(app, client):
    app.dependency_overrides[get_gateway] = lambda: FailingGateway()
    return client


class TestAuthentication:
    @pytest.mark.parametrize("path", [
        "/api/search?q=python",
        "/api/search/suggestions?q=py",
        "/api/search/popular",
        "/api/startups/discover",
        "/api/startups/trending",
        "/api/startups/recommendations",
        "/api/startups/analytics",
        "/api/certificates/logos",
    ])
    async def test_missing_identity_is_401(self, client, path):
        resp = await client.get(path)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}

    async def test_analytics_forbidden_for_youth(self, client):
        resp = await client.get("/api/startups/analytics", headers=auth_headers(role="YOUTH"))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}

    async def test_unknown_role_forbidden(self, client):
        resp = await client.get("/api/search?q=python", headers=auth_headers(role="GUEST"))
        assert resp.status_code == 403


class TestSearchRoutes:
    async def test_global_search_shape(self, client, make_job):
        await make_job(title="Desarrollador Python")

        resp = await client.get("/api/search?q=python&type=job&limit=5", headers=auth_headers())

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["query"] == "python"
        assert body["total"] == 1
        assert body["filters"]["type"] == ["job"]
        assert body["filters"]["limit"] == 5
        result = body["results"][0]
        assert result["type"] == "job"
        assert result["url"] == f"/jobs/{result['id']}"
        assert "failedSources" not in body

    async def test_short_query_is_empty_success(self, client):
        resp = await client.get("/api/search?q=a", headers=auth_headers())

        assert resp.status_code == 200
        assert resp.json()["results"] == []
        assert resp.json()["total"] == 0

    async def test_suggestions(self, client, make_job):
        await make_job(title="Vendedor")

        resp = await client.get("/api/search/suggestions?q=vend", headers=auth_headers())

        assert resp.json() == {"success": True, "suggestions": ["Vendedor"]}

    async def test_popular(self, client):
        resp = await client.get("/api/search/popular?limit=2", headers=auth_headers())

        assert resp.status_code == 200
        assert resp.json()["searches"] == config.POPULAR_SEARCHES[:2]

    async def test_failure_is_500_without_details(self, failing_client):
        resp = await failing_client.get("/api/search?q=python", headers=auth_headers())

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to perform search"}
        assert "10.0.0.5" not in resp.text


class TestStartupRoutes:
    async def test_discover_shape(self, client, make_startup):
        await make_startup(name="Tejidos", category="CRAFTS", employees=4)

        resp = await client.get(
            "/api/startups/discover?category=CRAFTS&minEmployees=1&sortBy=bogus",
            headers=auth_headers(),
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["total"] == 1
        assert (body["limit"], body["offset"]) == (20, 0)
        assert body["items"][0]["name"] == "Tejidos"
        assert body["items"][0]["owner"]["id"] == "owner-1"
        assert set(body["facets"]) == {"categories", "businessStages", "municipalities", "departments"}

    async def test_malformed_filters_dropped_by_default(self, client, make_startup, monkeypatch):
        monkeypatch.setattr(config, "STRICT_FILTERS", False)
        await make_startup()

        resp = await client.get("/api/startups/discover?minEmployees=lots&limit=-3", headers=auth_headers())

        assert resp.status_code == 200
        assert resp.json()["limit"] == 20

    async def test_malformed_filters_rejected_when_strict(self, client, monkeypatch):
        monkeypatch.setattr(config, "STRICT_FILTERS", True)

        resp = await client.get("/api/startups/discover?minEmployees=lots", headers=auth_headers())

        assert resp.status_code == 400
        assert "minEmployees" in resp.json()["error"]

    async def test_trending_and_recommendations(self, client, make_startup, make_user):
        await make_user(user_id="user-1", interests=["TECH"])
        await make_startup(name="Hot", views_count=30, created_at=utcnow(), updated_at=utcnow())

        trending = await client.get("/api/startups/trending", headers=auth_headers())
        recs = await client.get("/api/startups/recommendations?limit=3", headers=auth_headers())

        assert [s["name"] for s in trending.json()["startups"]] == ["Hot"]
        assert trending.json()["limit"] == 10
        assert recs.json()["limit"] == 3
        assert recs.json()["startups"][0]["recommendationReason"] == "Basado en tu interés en TECH"

    async def test_analytics_for_institution(self, client, make_startup):
        await make_startup()

        resp = await client.get("/api/startups/analytics", headers=auth_headers(role="INSTITUTION"))

        assert resp.status_code == 200
        assert resp.json()["analytics"]["totalStartups"] == 1

    async def test_search_requires_query(self, client):
        resp = await client.get("/api/startups/search", headers=auth_headers())

        assert resp.status_code == 400
        assert resp.json() == {"error": "Query parameter 'q' is required"}

    async def test_search(self, client, make_startup):
        await make_startup(name="Agro Sol", category="AGRO")

        resp = await client.get("/api/startups/search?q=agro", headers=auth_headers())

        assert resp.json()["startups"][0]["searchScore"] == 18

    async def test_by_stage_validates(self, client, make_startup):
        await make_startup(name="Growing", business_stage="GROWING")

        ok = await client.get("/api/startups/by-stage/growing", headers=auth_headers())
        bad = await client.get("/api/startups/by-stage/unicorn", headers=auth_headers())

        assert [s["name"] for s in ok.json()["startups"]] == ["Growing"]
        assert bad.status_code == 400

    async def test_by_category(self, client, make_startup):
        await make_startup(name="Pan", category="FOOD")

        resp = await client.get("/api/startups/by-category/FOOD", headers=auth_headers())

        assert [s["name"] for s in resp.json()["startups"]] == ["Pan"]

    async def test_by_location_requires_a_place(self, client):
        resp = await client.get("/api/startups/by-location", headers=auth_headers())
        assert resp.status_code == 400

    async def test_failure_is_500(self, failing_client):
        resp = await failing_client.get("/api/startups/discover", headers=auth_headers())

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to discover startups"}


class TestMisc:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}

    async def test_unknown_route_uses_error_body(self, client):
        resp = await client.get("/api/nothing-here", headers=auth_headers())
        assert resp.status_code == 404
        assert "error" in resp.json()

    async def test_certificate_logos(self, client, tmp_path, monkeypatch):
        from cemse import assets

        (tmp_path / "cemse.png").write_bytes(b"png")
        monkeypatch.setattr(config, "CERTIFICATE_LOGO_DIR", str(tmp_path))
        assets.reset_certificate_logos()

        resp = await client.get("/api/certificates/logos", headers=auth_headers())

        assets.reset_certificate_logos()
        assert resp.status_code == 200
        assert list(resp.json()["logos"]) == ["cemse"]

    async def test_certificate_logos_load_off_the_event_loop(self, client, tmp_path, monkeypatch):
        import threading

        from cemse import assets

        loop_thread = threading.get_ident()
        loader_threads = []
        real_load = assets.load_logos

        def recording_load(directory):
            loader_threads.append(threading.get_ident())
            return real_load(directory)

        monkeypatch.setattr(config, "CERTIFICATE_LOGO_DIR", str(tmp_path))
        monkeypatch.setattr(assets, "load_logos", recording_load)
        assets.reset_certificate_logos()

        resp = await client.get("/api/certificates/logos", headers=auth_headers())

        assets.reset_certificate_logos()
        assert resp.status_code == 200
        assert loader_threads and loader_threads[0] != loop_thread
