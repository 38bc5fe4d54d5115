"""Permission system models."""

import time

from pydantic import BaseModel, Field

WILDCARD = "*"


class PermissionMode(BaseModel):
    """Named policy bundle of auto-approve and auto-deny tool patterns."""

    name: str
    description: str = ""
    auto_approve: list[str] = Field(default_factory=list)
    auto_deny: list[str] = Field(default_factory=list)


class PermissionDecision(BaseModel):
    """Cached outcome of a permission request under the active mode."""

    tool_name: str
    allowed: bool
    reason: str
    timestamp: float = Field(default_factory=time.time)
