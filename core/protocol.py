"""
Protocol message models.

Inbound messages are validated with these models before the router acts on
them. Field names follow the wire format (camelCase); extra fields are
ignored.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import ExternalToolCall, ModelPurpose, SafetyMode, SessionMode

PROTOCOL_VERSION = 1


class ProtocolMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str


class NewSessionRequest(ProtocolMessage):
    sessionId: str | None = None
    mode: SessionMode | None = None
    workingDirectory: str | None = None
    permissionMode: SafetyMode | None = None


class PromptRequest(ProtocolMessage):
    sessionId: str
    prompt: str
    modelName: str | None = None


class ToolCallRequest(ProtocolMessage):
    sessionId: str
    toolCall: ExternalToolCall


class ModelCommandRequest(ProtocolMessage):
    command: str
    modelName: str | None = None
    prompt: str | None = None
    purpose: ModelPurpose | None = None


class SessionRequest(ProtocolMessage):
    """Any message that only addresses a session (cancel, end_session)."""

    sessionId: str


class SetModeRequest(ProtocolMessage):
    sessionId: str
    mode: SessionMode


class ErrorResponse(BaseModel):
    type: Literal["error"] = "error"
    error: str


class TextResponse(BaseModel):
    type: Literal["text"] = "text"
    text: str
    model: str


class ModelSummary(BaseModel):
    name: str
    provider: str
    isCurrent: bool = False


class Capabilities(BaseModel):
    tools: bool = True
    multiModel: bool = True
    fileOperations: bool = True
    bashCommands: bool = True
    supportedTools: list[str] = Field(default_factory=list)


def error_response(message: str) -> dict[str, Any]:
    return ErrorResponse(error=message).model_dump()
