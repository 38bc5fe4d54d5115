"""
Core domain exceptions.

These exceptions are transport-agnostic and are caught by the protocol router,
which converts them into typed ``error`` response messages.
"""


class CoreError(Exception):
    """Base exception for all core errors."""

    pass


class InvalidMessageError(CoreError):
    """Raised when an inbound message is missing required fields."""

    pass


class NotFoundError(CoreError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidOperationError(CoreError):
    """Raised when an operation cannot be performed in the current state."""

    pass


class SessionExistsError(InvalidOperationError):
    """Raised when an explicit session id collides with a live session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session already exists: {session_id}")


class CapacityError(CoreError):
    """Raised when the session cap is still reached after an idle sweep."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Maximum session limit ({limit}) reached")


class ToolTimeoutError(CoreError):
    """Raised when a tool execution exceeds its deadline."""

    def __init__(self, tool_name: str, timeout: float):
        self.tool_name = tool_name
        self.timeout = timeout
        super().__init__(f"Tool execution timeout: {tool_name} (after {timeout:g}s)")


class CollaboratorError(CoreError):
    """Raised by collaborators that cannot serve a request."""

    pass
