"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from core import AdapterContext

from ..state import get_context


router = APIRouter()


@router.get("/health")
async def health(context: AdapterContext = Depends(get_context)) -> dict:
    """Health check endpoint."""
    return {"status": "ok", "sessions": len(context.sessions)}
