"""
Transports for the adapter.

Exposes the adapter context over stdio (one JSON record per line) or HTTP
(one JSON record per request).
"""

from .app import create_app
from .logging_config import log_timing, message_fields, setup_logging
from .stdio import run_stdio, serve_stdio

__all__ = ["create_app", "run_stdio", "serve_stdio", "setup_logging", "log_timing", "message_fields"]
