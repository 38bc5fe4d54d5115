"""
Tool execution dispatch with a hard deadline.

Every execution occupies a pending slot until it finishes, fails, or times
out. A timed-out slot is reclaimed immediately, whatever the underlying
execution does afterwards.
"""

import asyncio
import logging

from core.collaborators import ToolExecutor
from core.exceptions import ToolTimeoutError
from core.models import InternalToolCall, ToolResult, gen_id

logger = logging.getLogger(__name__)

# Hard timeout for tool executions (5 minutes)
DEFAULT_TOOL_TIMEOUT_SECONDS = 300


class ToolDispatcher:
    """Runs internal tool calls through the executor collaborator."""

    def __init__(self, executor: ToolExecutor, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS):
        """
        Initialize the dispatcher.

        Args:
            executor: Tool execution collaborator
            timeout: Per-execution deadline in seconds
        """
        self.executor = executor
        self.timeout = timeout
        self._pending: dict[str, asyncio.Task[ToolResult]] = {}

    def pending_count(self) -> int:
        return len(self._pending)

    async def execute(self, call: InternalToolCall) -> ToolResult:
        """
        Execute a tool call.

        Collaborator failures are converted to an error-tagged result.

        Args:
            call: The internal tool call

        Returns:
            The tool result

        Raises:
            ToolTimeoutError: If the execution exceeds the deadline
        """
        slot = gen_id("run_")
        task = asyncio.create_task(self._run(call))
        self._pending[slot] = task

        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
            if task not in done:
                logger.warning("Tool %s (%s) timed out after %ss", call.name, call.id, self.timeout)
                raise ToolTimeoutError(call.name, self.timeout)
            return task.result()
        finally:
            if not task.done():
                task.cancel()
            self._pending.pop(slot, None)

    async def _run(self, call: InternalToolCall) -> ToolResult:
        logger.debug("Executing tool: %s (%s)", call.name, call.id)
        try:
            return await self.executor.execute(call)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Tool %s execution failed", call.name)
            return ToolResult(
                tool_use_id=call.id,
                content=f"Error executing {call.name}: {e}",
                is_error=True,
            )

    async def shutdown(self) -> None:
        """Cancel every pending execution."""
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        logger.info("Tool dispatcher shut down (%d pending cancelled)", len(tasks))
