"""
Local tool executor.

Runs internal tool calls directly against the local file system and shell.
This is a convenience backend for development and single-user setups; it
is not a sandbox.
"""

import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx

from config.defaults import (
    DEFAULT_SHELL_TIMEOUT_SECONDS,
    DEFAULT_WEB_FETCH_TIMEOUT_SECONDS,
    MAX_TOOL_OUTPUT_CHARS,
)
from core.models import InternalToolCall, ToolResult

from .web_fetch import fetch_url

logger = logging.getLogger(__name__)

MAX_GREP_MATCHES = 500
SKIPPED_DIRECTORIES = {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv"}

ToolHandler = Callable[[str, dict[str, Any]], Awaitable[ToolResult]]


def _truncate(text: str) -> str:
    if len(text) <= MAX_TOOL_OUTPUT_CHARS:
        return text
    return text[:MAX_TOOL_OUTPUT_CHARS] + f"\n... (truncated, {len(text) - MAX_TOOL_OUTPUT_CHARS} more chars)"


def _is_binary(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return b"\x00" in f.read(1024)
    except OSError:
        return True


def _require(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value:
            return value
    raise ValueError(f"Missing required argument: {keys[0]}")


class LocalToolExecutor:
    """Executes FileRead, FileWrite, FileEdit, Bash, Glob, Grep, Task and WebFetch."""

    def __init__(
        self,
        working_directory: str | None = None,
        shell_timeout: float = DEFAULT_SHELL_TIMEOUT_SECONDS,
        fetch_timeout: float = DEFAULT_WEB_FETCH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.working_directory = Path(working_directory or os.getcwd())
        self.shell_timeout = shell_timeout
        self.fetch_timeout = fetch_timeout
        self._transport = transport
        self._handlers: dict[str, ToolHandler] = {
            "FileRead": self._file_read,
            "FileWrite": self._file_write,
            "FileEdit": self._file_edit,
            "Bash": self._bash,
            "Glob": self._glob,
            "Grep": self._grep,
            "Task": self._task,
            "WebFetch": self._web_fetch,
        }

    def supported_tools(self) -> list[str]:
        return list(self._handlers)

    async def execute(self, call: InternalToolCall) -> ToolResult:
        """
        Execute one internal tool call.

        Unknown tools yield an error-tagged result. Missing arguments raise
        ValueError, which the dispatcher turns into an error result.
        """
        handler = self._handlers.get(call.name)
        if handler is None:
            return ToolResult(
                tool_use_id=call.id,
                content=f"Tool {call.name} not yet implemented in local executor",
                is_error=True,
            )
        payload = call.input if isinstance(call.input, dict) else {}
        logger.debug("Running %s (%s)", call.name, call.id)
        return await handler(call.id, payload)

    def _resolve(self, path: str) -> Path:
        resolved = Path(path).expanduser()
        if not resolved.is_absolute():
            resolved = self.working_directory / resolved
        return resolved

    # =========================================================================
    # Files
    # =========================================================================

    async def _file_read(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        path = self._resolve(_require(payload, "file_path", "abs_path"))
        try:
            content = path.read_text(errors="replace")
        except FileNotFoundError:
            return ToolResult(tool_use_id=call_id, content=f"File not found: {path}", is_error=True)
        except OSError as e:
            return ToolResult(tool_use_id=call_id, content=f"Failed to read file: {e}", is_error=True)
        return ToolResult(tool_use_id=call_id, content=[{"type": "text", "text": _truncate(content)}])

    async def _file_write(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        path = self._resolve(_require(payload, "abs_path", "file_path"))
        content = payload.get("content")
        if content is None:
            raise ValueError("Missing required argument: content")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(str(content))
        except OSError as e:
            return ToolResult(tool_use_id=call_id, content=f"Failed to write file: {e}", is_error=True)
        return ToolResult(tool_use_id=call_id, content=f"File written successfully: {path}")

    async def _file_edit(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        path = self._resolve(_require(payload, "abs_path", "file_path"))
        old_string = payload.get("old_string")
        new_string = payload.get("new_string")
        if not old_string or new_string is None:
            raise ValueError("Missing required argument: old_string/new_string")

        try:
            content = path.read_text()
        except FileNotFoundError:
            return ToolResult(tool_use_id=call_id, content=f"File not found: {path}", is_error=True)

        count = content.count(old_string)
        if count == 0:
            return ToolResult(tool_use_id=call_id, content=f"old_string not found in {path}", is_error=True)
        if count > 1:
            return ToolResult(
                tool_use_id=call_id,
                content=f"old_string is not unique in {path} ({count} matches)",
                is_error=True,
            )

        path.write_text(content.replace(old_string, new_string, 1))
        return ToolResult(tool_use_id=call_id, content=f"File edited successfully: {path}")

    # =========================================================================
    # Shell
    # =========================================================================

    async def _bash(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        command = _require(payload, "command")
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=self.working_directory,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.shell_timeout)
        except asyncio.TimeoutError:
            return ToolResult(
                tool_use_id=call_id,
                content=f"Command timed out after {self.shell_timeout:g}s",
                is_error=True,
            )
        finally:
            # Also reached on cancellation by the dispatcher deadline or shutdown
            if process.returncode is None:
                process.kill()
                await asyncio.shield(process.wait())

        out = stdout.decode(errors="replace")
        err = stderr.decode(errors="replace")
        if process.returncode == 0:
            return ToolResult(tool_use_id=call_id, content=_truncate(out or err))
        return ToolResult(
            tool_use_id=call_id,
            content=_truncate(f"Command failed with exit code {process.returncode}: {err}"),
            is_error=True,
        )

    # =========================================================================
    # Search
    # =========================================================================

    async def _glob(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        pattern = _require(payload, "pattern")
        base = self._resolve(payload.get("path") or ".")
        try:
            files = sorted(str(p.relative_to(base)) for p in base.glob(pattern))
        except (OSError, ValueError, NotImplementedError) as e:
            return ToolResult(tool_use_id=call_id, content=f"Glob failed: {e}", is_error=True)
        return ToolResult(tool_use_id=call_id, content="\n".join(files))

    def _search_files(self, base: Path) -> list[Path]:
        if base.is_file():
            return [base]
        files = []
        for root, dirs, names in os.walk(base):
            dirs[:] = sorted(d for d in dirs if d not in SKIPPED_DIRECTORIES)
            files.extend(Path(root) / name for name in sorted(names))
        return files

    async def _grep(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        try:
            regex = re.compile(_require(payload, "pattern"))
        except re.error as e:
            return ToolResult(tool_use_id=call_id, content=f"Invalid pattern: {e}", is_error=True)

        base = self._resolve(payload.get("path") or ".")
        if not base.exists():
            return ToolResult(tool_use_id=call_id, content=f"Path not found: {base}", is_error=True)

        matches: list[str] = []
        for path in self._search_files(base):
            if _is_binary(path):
                continue
            try:
                lines = path.read_text(errors="ignore").splitlines()
            except OSError:
                continue
            for lineno, line in enumerate(lines, start=1):
                if regex.search(line):
                    matches.append(f"{path}:{lineno}:{line}")
                    if len(matches) >= MAX_GREP_MATCHES:
                        matches.append(f"... (stopped after {MAX_GREP_MATCHES} matches)")
                        return ToolResult(tool_use_id=call_id, content="\n".join(matches))

        return ToolResult(tool_use_id=call_id, content="\n".join(matches) or "No matches found")

    # =========================================================================
    # Misc
    # =========================================================================

    async def _task(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        return ToolResult(
            tool_use_id=call_id,
            content=f"Task created: {payload.get('description') or 'Unnamed task'}",
        )

    async def _web_fetch(self, call_id: str, payload: dict[str, Any]) -> ToolResult:
        url = _require(payload, "url")
        try:
            content = await fetch_url(url, timeout=self.fetch_timeout, transport=self._transport)
        except ValueError as e:
            return ToolResult(tool_use_id=call_id, content=f"Fetch failed: {e}", is_error=True)
        return ToolResult(tool_use_id=call_id, content=_truncate(content))
