"""
Core adapter logic.

This package contains the transport-agnostic session, permission,
tool-mapping and model-dispatch engine. The server package provides the
stdio and HTTP bindings around it; the backends package provides concrete
tool executors and model invokers.
"""

from .collaborators import ModelInvoker, ToolExecutor
from .context import AdapterContext
from .events import SessionEvent, SessionEventBus, SessionEventType
from .exceptions import (
    CapacityError,
    CollaboratorError,
    CoreError,
    InvalidMessageError,
    InvalidOperationError,
    NotFoundError,
    SessionExistsError,
    ToolTimeoutError,
)
from .model_registry import DEFAULT_MODEL_POINTERS, DEFAULT_MODEL_PROFILES, ModelRegistry
from .models import (
    ExternalToolCall,
    InternalToolCall,
    InvokeOptions,
    ModelPointers,
    ModelProfile,
    ParallelRequest,
    ParallelResult,
    SafetyMode,
    Session,
    SessionConfig,
    SessionMode,
    SessionSnapshot,
    ToolResult,
    gen_id,
)
from .permissions import PermissionPolicy
from .router import ProtocolRouter
from .sessions import SessionStore
from .tools import ToolConverter, ToolDispatcher, ToolMapping

__all__ = [
    # Exceptions
    "CoreError",
    "InvalidMessageError",
    "NotFoundError",
    "InvalidOperationError",
    "SessionExistsError",
    "CapacityError",
    "ToolTimeoutError",
    "CollaboratorError",
    # Events
    "SessionEvent",
    "SessionEventBus",
    "SessionEventType",
    # Models
    "Session",
    "SessionConfig",
    "SessionMode",
    "SafetyMode",
    "SessionSnapshot",
    "ExternalToolCall",
    "InternalToolCall",
    "ToolResult",
    "ModelProfile",
    "ModelPointers",
    "InvokeOptions",
    "ParallelRequest",
    "ParallelResult",
    "gen_id",
    # Collaborators
    "ToolExecutor",
    "ModelInvoker",
    # Components
    "PermissionPolicy",
    "ToolMapping",
    "ToolConverter",
    "ToolDispatcher",
    "SessionStore",
    "ModelRegistry",
    "DEFAULT_MODEL_PROFILES",
    "DEFAULT_MODEL_POINTERS",
    "ProtocolRouter",
    "AdapterContext",
]
