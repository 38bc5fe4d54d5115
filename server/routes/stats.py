"""
Session statistics endpoint.
"""

from fastapi import APIRouter, Depends

from core import AdapterContext

from ..state import get_context


router = APIRouter()


@router.get("/sessions")
async def session_stats(context: AdapterContext = Depends(get_context)) -> dict:
    """Summary of the session store."""
    return await context.sessions.get_stats()
