"""
FastAPI application setup and configuration.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.defaults import VERSION
from core import AdapterContext
from server.middleware import RequestLoggingMiddleware
from server.routes import register_routes

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_CORS_ORIGINS = "*"
API_TITLE = "ACP Adapter"


def _cors_origins() -> list[str]:
    # Set CORS_ORIGINS to a comma-separated list to restrict browser clients
    cors_origins_env = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    if cors_origins_env == DEFAULT_CORS_ORIGINS:
        return [DEFAULT_CORS_ORIGINS]
    return [origin.strip() for origin in cors_origins_env.split(",")]


# =============================================================================
# FastAPI App
# =============================================================================


def create_app(context: AdapterContext) -> FastAPI:
    """
    Build the HTTP transport around an adapter context.

    The context is started and stopped with the app lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await context.start()
        try:
            yield
        finally:
            await context.stop()

    app = FastAPI(title=API_TITLE, version=VERSION, lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware (added after CORS so it runs first)
    app.add_middleware(RequestLoggingMiddleware)

    register_routes(app)
    logger.debug("HTTP app created")
    return app
