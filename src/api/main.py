"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository import InMemoryRegistryStore, PostgresRegistryStore, run_migrations
from src.api.dependencies import build_registry_services
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Name Registration API v1 - Commit, register and manage .vne domains",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup (postgres backend)
    - Runs migrations on startup
    - Wires the registry services onto app.state
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    pool: ConnectionPool | None = None

    logger.info("Starting application...")

    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)
        store = PostgresRegistryStore(pool)
    else:
        logger.info("Using in-memory registry store")
        store = InMemoryRegistryStore()

    app.state.services = build_registry_services(store, settings)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="vne-registrar",
    description="Name Registration API - Commit-reveal registration of .vne domains",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and store are healthy.
    Raises exception if the store is unreachable.
    """
    request.app.state.services.store.ping()
    return {"status": "healthy"}
