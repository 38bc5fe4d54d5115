"""ToolsConfig model."""

from pydantic import BaseModel, Field

from .defaults import (
    DEFAULT_DECISION_RETENTION_SECONDS,
    DEFAULT_SHELL_TIMEOUT_SECONDS,
    DEFAULT_TOOL_TIMEOUT_SECONDS,
)


class ToolsConfig(BaseModel):
    """Tool execution limits."""

    execution_timeout_seconds: float = Field(
        default=DEFAULT_TOOL_TIMEOUT_SECONDS,
        gt=0,
        description="Hard deadline for a single tool execution",
    )
    decision_retention_seconds: float = Field(
        default=DEFAULT_DECISION_RETENTION_SECONDS,
        gt=0,
        description="Age after which cached permission decisions are purged",
    )
    shell_timeout_seconds: float = Field(
        default=DEFAULT_SHELL_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for shell commands run by the local executor",
    )
