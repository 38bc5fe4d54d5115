"""Static mapping rules between external and internal tool names."""

from dataclasses import dataclass
from typing import Any, Callable

InputTransform = Callable[[Any], Any]
ResultTransform = Callable[[dict[str, Any]], Any]


@dataclass(frozen=True)
class ToolMapping:
    """One translation rule.

    Attributes:
        external_name: Tool name used by the client protocol
        internal_name: Tool name understood by the execution engine
        transform: Maps the external input payload to the internal one
        reverse_transform: Maps an internal result dict back to external form
    """
    external_name: str
    internal_name: str
    transform: InputTransform | None = None
    reverse_transform: ResultTransform | None = None


def _file_target(payload: dict[str, Any]) -> dict[str, Any]:
    path = payload.get("path")
    return {"abs_path": path, "file_path": path}


DEFAULT_TOOL_MAPPINGS: list[ToolMapping] = [
    ToolMapping("read_file", "FileRead", transform=_file_target),
    ToolMapping(
        "write_file",
        "FileWrite",
        transform=lambda payload: {**_file_target(payload), "content": payload.get("content")},
    ),
    ToolMapping(
        "edit_file",
        "FileEdit",
        transform=lambda payload: {
            **_file_target(payload),
            "old_string": payload.get("old_string"),
            "new_string": payload.get("new_string"),
        },
    ),
    ToolMapping("run_command", "Bash", transform=lambda payload: {"command": payload.get("command")}),
    ToolMapping(
        "glob",
        "Glob",
        transform=lambda payload: {"pattern": payload.get("pattern"), "path": payload.get("path")},
    ),
    ToolMapping(
        "search",
        "Grep",
        transform=lambda payload: {"pattern": payload.get("pattern"), "path": payload.get("path")},
    ),
    ToolMapping("create_task", "Task", transform=lambda payload: {"description": payload.get("description")}),
    ToolMapping("web_search", "WebSearch", transform=lambda payload: {"query": payload.get("query")}),
    ToolMapping("web_fetch", "WebFetch", transform=lambda payload: {"url": payload.get("url")}),
]
