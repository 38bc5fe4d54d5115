"""Built-in permission modes."""

from .models import WILDCARD, PermissionMode

READ_TOOLS = ["read_file", "glob", "search"]

BUILTIN_MODES: dict[str, PermissionMode] = {
    "default": PermissionMode(
        name="default",
        description="Approve reads and searches, deny writes and command execution",
        auto_approve=list(READ_TOOLS),
        auto_deny=["run_command", "edit_file", "write_file"],
    ),
    "accept_edits": PermissionMode(
        name="accept_edits",
        description="Approve reads and searches, deny command execution, writes need approval",
        auto_approve=list(READ_TOOLS),
        auto_deny=["run_command"],
    ),
    "bypass_permissions": PermissionMode(
        name="bypass_permissions",
        description="Approve every operation",
        auto_approve=[WILDCARD],
    ),
    "plan": PermissionMode(
        name="plan",
        description="Planning mode - no operations are executed",
        auto_deny=[WILDCARD],
    ),
}

DEFAULT_MODE_NAME = "default"
