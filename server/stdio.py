"""
Stdio transport.

Reads one JSON message per line from stdin and writes one JSON response
per line to stdout. stdout carries protocol records only; logging goes to
stderr (see ``setup_logging``).
"""

import asyncio
import json
import logging
import sys
from typing import Any, TextIO

from core import AdapterContext
from core.protocol import error_response

from .logging_config import log_timing, message_fields

logger = logging.getLogger(__name__)

# Maximum size of one inbound line
STDIN_LINE_LIMIT = 16 * 1024 * 1024


async def open_stdin_reader() -> asyncio.StreamReader:
    """Wrap the process stdin in an asyncio stream reader."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=STDIN_LINE_LIMIT)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


def write_message(writer: TextIO, message: dict[str, Any]) -> None:
    writer.write(json.dumps(message, default=str) + "\n")
    writer.flush()


async def _dispatch(context: AdapterContext, message: Any) -> dict[str, Any] | None:
    with log_timing(logger, "stdio", message_fields(message)):
        try:
            return await context.handle_message(message)
        except Exception as e:
            logger.exception("Message handler crashed")
            return error_response(f"Internal error: {e}")


async def _discard_line(reader: asyncio.StreamReader, consumed: int) -> None:
    """Drop the rest of an oversized line, up to and including its newline."""
    while True:
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as e:
            consumed = e.consumed
        except asyncio.IncompleteReadError:
            return


async def run_stdio(
    context: AdapterContext,
    reader: asyncio.StreamReader | None = None,
    writer: TextIO | None = None,
) -> int:
    """
    Serve protocol messages until EOF.

    Lines that are blank, not valid JSON or longer than the reader limit
    are logged and skipped. Messages
    are handled one at a time, so responses come out in request order.

    Args:
        context: Adapter context to route messages through
        reader: Line source (defaults to stdin)
        writer: Response sink (defaults to stdout)

    Returns:
        Number of messages handled
    """
    reader = reader or await open_stdin_reader()
    writer = writer or sys.stdout
    handled = 0

    logger.info("Listening on stdio")
    while True:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF, possibly after a final line with no newline
            line = e.partial
            if not line:
                break
        except asyncio.LimitOverrunError as e:
            logger.warning("Skipping line longer than the stdin limit")
            await _discard_line(reader, e.consumed)
            continue

        try:
            text = line.decode().strip()
            if not text:
                continue
            message = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Skipping unparseable line: %s", e)
            continue

        response = await _dispatch(context, message)
        if response is not None:
            write_message(writer, response)
        handled += 1

    logger.info("Stdin closed after %d message(s)", handled)
    return handled


async def serve_stdio(context: AdapterContext) -> None:
    """Run the stdio transport with the context started for its duration."""
    async with context:
        await run_stdio(context)
