"""CrowdLedger API — FastAPI application entry point.

Invariants:
    - Routers registered explicitly: health, campaigns, contributions
    - Logging configured and the database pool created before the first request;
      the pool is disposed on shutdown
    - CORS origins come from settings

Design Decisions:
    - Lifespan over @app.on_event: startup and shutdown live in one function
    - Error handlers live in api/error_handlers.py so this module stays wiring-only
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import crowdledger.infrastructure.database as database
from crowdledger import __version__
from crowdledger.api.error_handlers import register_error_handlers
from crowdledger.api.routes import campaigns, contributions, health
from crowdledger.config import get_settings
from crowdledger.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"CrowdLedger API {__version__} started")
    try:
        yield
    finally:
        await manager.dispose()
        logger.info("CrowdLedger API stopped, database pool disposed")


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title="CrowdLedger API",
        description="Goal-bounded campaign contributions with an append-only log",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    for module in (health, campaigns, contributions):
        application.include_router(module.router)
    register_error_handlers(application)
    return application


app = create_app()
