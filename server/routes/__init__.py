"""
Route registration for the HTTP transport.
"""

from fastapi import FastAPI

from . import acp, health, stats


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(health.router)
    app.include_router(acp.router)
    app.include_router(stats.router)
