"""
Protocol endpoint: one message per request, one response per reply.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core import AdapterContext
from core.protocol import error_response

from ..logging_config import log_timing, message_fields
from ..state import get_context


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/acp")
async def handle_acp_message(request: Request, context: AdapterContext = Depends(get_context)) -> JSONResponse:
    """Route one protocol message through the adapter."""
    try:
        message = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Rejected malformed request body: %s", e)
        return JSONResponse(error_response(f"Invalid JSON: {e}"), status_code=400)

    with log_timing(logger, "http", message_fields(message)):
        response = await context.handle_message(message)

    if response is None:
        return JSONResponse(
            error_response("Message must be an object with a string 'type' field"),
            status_code=400,
        )
    return JSONResponse(response)
