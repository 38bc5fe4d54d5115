"""
Collaborator interfaces consumed by the core.

The core never executes tools or runs model inference itself. It calls these
two protocols; concrete implementations live in the ``backends`` package.
"""

from typing import Protocol

from .models import InternalToolCall, InvokeOptions, ModelProfile, ToolResult


class ToolExecutor(Protocol):
    """Executes one internal tool call."""

    async def execute(self, call: InternalToolCall) -> ToolResult:
        """Run the tool and return its result. May raise on failure."""
        ...


class ModelInvoker(Protocol):
    """Runs one prompt against a model profile."""

    async def invoke(
        self, profile: ModelProfile, prompt: str, options: InvokeOptions | None = None
    ) -> str:
        """Return the model's text response. May raise on failure."""
        ...
