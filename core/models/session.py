"""Session model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SessionMode(str, Enum):
    """Permission mode a session runs in."""

    DEFAULT = "default"
    ACCEPT_EDITS = "accept_edits"
    BYPASS_PERMISSIONS = "bypass_permissions"
    PLAN = "plan"


class SafetyMode(str, Enum):
    """Client-facing safety preference carried by a session."""

    SAFE = "safe"
    YOLO = "yolo"


class Session(BaseModel):
    id: str
    mode: SessionMode = SessionMode.DEFAULT
    working_directory: str
    permission_mode: SafetyMode = SafetyMode.YOLO
    created_at: float
    last_activity: float
    tool_call_count: int = Field(default=0, ge=0)
    is_active: bool = True
    cancelled: bool = Field(
        default=False,
        description="Set by a cancel request; prompts against a cancelled session fail fast",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionConfig(BaseModel):
    """Creation settings or a partial update for a session; unset fields are left alone."""

    id: str | None = None
    mode: SessionMode | None = None
    working_directory: str | None = None
    permission_mode: SafetyMode | None = None
