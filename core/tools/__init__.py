"""
Tool mapping, conversion and dispatch.
"""

from .converter import MAX_TRACKED_CALLS, ToolConverter
from .dispatcher import DEFAULT_TOOL_TIMEOUT_SECONDS, ToolDispatcher
from .mappings import DEFAULT_TOOL_MAPPINGS, ToolMapping

__all__ = [
    "ToolMapping",
    "DEFAULT_TOOL_MAPPINGS",
    "ToolConverter",
    "MAX_TRACKED_CALLS",
    "ToolDispatcher",
    "DEFAULT_TOOL_TIMEOUT_SECONDS",
]
