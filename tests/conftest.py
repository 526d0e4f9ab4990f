"""
Pytest configuration and shared fixtures.

Each test gets a fresh SQLite database file (aiosqlite) so concurrent
lookups can open independent connections, plus factories for the
marketplace records.
"""

import datetime as dt
import os

# Keep the app from touching a local database while tests import it
os.environ.setdefault("CREATE_TABLES", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cemse.app import create_app
from cemse.database import Gateway, get_gateway, init_db, json_dumps
from cemse.models import Company, Course, Entrepreneurship, JobOffer, Profile, User

NOW = dt.datetime(2026, 10, 1, 12, 0, 0)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", json_serializer=json_dumps)
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def gateway(session_factory) -> Gateway:
    return Gateway(session_factory)


@pytest.fixture
async def db(session_factory):
    """Session used by tests to insert fixture records."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(gateway):
    app = create_app()
    app.dependency_overrides[get_gateway] = lambda: gateway
    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user_id: str = "user-1", role: str = "YOUTH") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db):
    async def factory(user_id=None, role="YOUTH", is_active=True, **profile_fields):
        user = User(role=role, is_active=is_active)
        if user_id:
            user.id = user_id
        user.email = f"{user_id or id(user)}@example.com"
        db.add(user)
        await db.flush()
        profile = Profile(
            user_id=user.id,
            first_name=profile_fields.pop("first_name", "Ana"),
            last_name=profile_fields.pop("last_name", "Quispe"),
            **profile_fields,
        )
        db.add(profile)
        await db.commit()
        return user

    return factory


@pytest.fixture
def make_startup(db, make_user):
    owner_holder = {}

    async def factory(owner=None, **fields):
        if owner is None:
            if "owner" not in owner_holder:
                owner_holder["owner"] = await make_user(user_id="owner-1")
            owner = owner_holder["owner"]
        defaults = {
            "name": "Startup",
            "description": "A local business",
            "category": "TECH",
            "business_stage": "STARTUP",
            "municipality": "Cochabamba",
            "department": "Cochabamba",
            "employees": 10,
            "annual_revenue": 50000.0,
            "is_public": True,
            "is_active": True,
            "views_count": 0,
            "created_at": NOW,
            "updated_at": NOW,
        }
        defaults.update(fields)
        startup = Entrepreneurship(owner_id=owner.id, **defaults)
        db.add(startup)
        await db.commit()
        return startup

    return factory


@pytest.fixture
def make_company(db):
    async def factory(**fields):
        defaults = {"name": "Acme", "business_sector": "Tecnología", "address": "Av. Blanco Galindo 123"}
        defaults.update(fields)
        company = Company(**defaults)
        db.add(company)
        await db.commit()
        return company

    return factory


@pytest.fixture
def make_job(db, make_company):
    async def factory(company=None, **fields):
        company = company or await make_company()
        defaults = {
            "title": "Desarrollador Python",
            "description": "Backend development",
            "location": "Cochabamba",
            "contract_type": "FULL_TIME",
            "skills_required": ["Python"],
            "created_at": NOW,
        }
        defaults.update(fields)
        job = JobOffer(company_id=company.id, **defaults)
        db.add(job)
        await db.commit()
        return job

    return factory


@pytest.fixture
def make_course(db):
    async def factory(**fields):
        defaults = {
            "title": "Python desde cero",
            "description": "Curso introductorio",
            "institution_name": "CEMSE",
            "category": "TECHNOLOGY",
            "tags": ["Python"],
            "created_at": NOW,
        }
        defaults.update(fields)
        course = Course(**defaults)
        db.add(course)
        await db.commit()
        return course

    return factory
