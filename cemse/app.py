"""
FastAPI application -- CEMSE discovery & search API.

Run locally:
    uvicorn cemse.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cemse import config
from cemse.database import init_db
from cemse.errors import add_exception_handlers
from cemse.routes import certificates, search, startups

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()

    # Schema is owned by the platform migrations; create it only for local dev
    if config.CREATE_TABLES:
        await init_db()
        logger.info("Database schema ensured")

    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="CEMSE Discovery API",
        version="1.0.0",
        description="Startup discovery and global search for the CEMSE employment & education platform",
        lifespan=lifespan,
    )
    add_exception_handlers(app)

    app.include_router(search.router)
    app.include_router(startups.router)
    app.include_router(certificates.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()
