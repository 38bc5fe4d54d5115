"""
Request-scoped access to the adapter context.

The context is attached to the FastAPI app by ``create_app``; route handlers
obtain it through the ``get_context`` dependency instead of a module global.
"""

from fastapi import Request

from core import AdapterContext


def get_context(request: Request) -> AdapterContext:
    """FastAPI dependency returning the app's adapter context."""
    return request.app.state.context
