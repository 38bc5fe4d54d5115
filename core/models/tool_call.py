"""Tool call and tool result models."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ExternalToolCall(BaseModel):
    """Tool invocation as named by the client protocol (e.g. ``read_file``)."""

    name: str
    input: Any = Field(default_factory=dict)
    id: str | None = None


class InternalToolCall(BaseModel):
    """Tool invocation in the internal vocabulary (e.g. ``FileRead``)."""

    name: str
    input: Any
    id: str


class ToolResult(BaseModel):
    """Outcome of an internal tool execution."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Any = None
    is_error: bool = False
