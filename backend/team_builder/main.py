"""Team Builder API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TeamBuilderError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging configured on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from team_builder.api.error_handlers import register_error_handlers
from team_builder.api.routes import builder_drag, builder_graph, builders, health, library
from team_builder.config import get_settings
from team_builder.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    logger.info("Team Builder API started")
    yield
    logger.info("Team Builder API shutting down")
    logging.root.removeHandler(handler)


app = FastAPI(
    title="Team Builder API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(library.router)
app.include_router(builders.router)
app.include_router(builder_graph.router)
app.include_router(builder_drag.router)

register_error_handlers(app)
