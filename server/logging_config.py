"""Logging setup and per-message timing for the adapter transports."""

import logging
import sys
import time
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Generator, Optional, TextIO

SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
)

DEFAULT_LOG_LEVEL = "INFO"

# Protocol messages slower than this are logged as warnings
SLOW_MESSAGE_THRESHOLD_MS = 1000.0

# Third-party loggers capped at WARNING whatever the adapter level
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "openai", "anthropic")


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Configure the root logger.

    Records go to stderr unless ``stream`` says otherwise: the stdio
    transport reserves stdout for protocol records. At DEBUG the format adds
    the function and line of each record.
    """
    level_name = (level or DEFAULT_LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=DETAILED_FORMAT if log_level == logging.DEBUG else SIMPLE_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=stream or sys.stderr,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def message_fields(message: Any) -> dict[str, Any]:
    """Pick the fields that identify a protocol message in timing logs."""
    if not isinstance(message, Mapping):
        return {"type": None}
    fields = {"type": message.get("type")}
    if message.get("sessionId"):
        fields["session"] = message["sessionId"]
    return fields


@contextmanager
def log_timing(
    logger: logging.Logger,
    transport: str,
    fields: Optional[Mapping[str, Any]] = None,
    level: int = logging.DEBUG,
) -> Generator[None, None, None]:
    """Log how long one protocol message took on a transport.

    Blocks slower than ``SLOW_MESSAGE_THRESHOLD_MS`` log at WARNING. The
    record is written even when the block raises.
    """
    details = " ".join(f"{key}={value}" for key, value in (fields or {}).items())
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms > SLOW_MESSAGE_THRESHOLD_MS:
            logger.warning("%s %s took %.1fms SLOW", transport, details, duration_ms)
        else:
            logger.log(level, "%s %s took %.1fms", transport, details, duration_ms)
