"""
Domain models for the adapter core.

These are the core data structures used throughout the application.
"""

from .model_profile import (
    InvokeOptions,
    ModelCost,
    ModelPointers,
    ModelProfile,
    ModelPurpose,
    ParallelRequest,
    ParallelResult,
)
from .session import SafetyMode, Session, SessionConfig, SessionMode
from .session_snapshot import SessionSnapshot
from .tool_call import ExternalToolCall, InternalToolCall, ToolResult
from .utils import gen_id

__all__ = [
    # Utils
    "gen_id",
    # Session models
    "SessionMode",
    "SafetyMode",
    "Session",
    "SessionConfig",
    "SessionSnapshot",
    # Tool models
    "ExternalToolCall",
    "InternalToolCall",
    "ToolResult",
    # Model dispatch
    "ModelCost",
    "ModelProfile",
    "ModelPointers",
    "ModelPurpose",
    "InvokeOptions",
    "ParallelRequest",
    "ParallelResult",
]
