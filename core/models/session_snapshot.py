"""SessionSnapshot model used for export and import."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .session import SafetyMode, Session, SessionMode


class SessionSnapshot(BaseModel):
    """Plain, serializable view of a session.

    Serialized with camelCase aliases; both alias and field names are accepted
    on input so that snapshots from other clients can be imported directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    mode: SessionMode = SessionMode.DEFAULT
    working_directory: str | None = Field(default=None, alias="workingDirectory")
    permission_mode: SafetyMode = Field(default=SafetyMode.YOLO, alias="permissionMode")
    created_at: float | None = Field(default=None, alias="createdAt")
    last_activity: float | None = Field(default=None, alias="lastActivity")
    tool_call_count: int = Field(default=0, ge=0, alias="toolCallCount")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_session(cls, session: Session) -> "SessionSnapshot":
        return cls(
            id=session.id,
            mode=session.mode,
            working_directory=session.working_directory,
            permission_mode=session.permission_mode,
            created_at=session.created_at,
            last_activity=session.last_activity,
            tool_call_count=session.tool_call_count,
            metadata=dict(session.metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        """Dump using the wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)
