"""idformat API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FormatEngineError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and format cache initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import idformat.infrastructure.database as database
from idformat.api.error_handlers import register_error_handlers
from idformat.api.routes import format_overrides, format_rules, health, identifier_display
from idformat.config import get_settings
from idformat.infrastructure.database import init_db
from idformat.infrastructure.observability import setup_logging
from idformat.services.format_cache import init_format_cache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_format_cache(settings.format_cache_ttl_seconds)
    logger.info("idformat API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("idformat API shutting down")


app = FastAPI(
    title="idformat API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes - explicit registration
app.include_router(health.router)
app.include_router(format_rules.router)
app.include_router(format_overrides.router)
app.include_router(identifier_display.router)

register_error_handlers(app)
