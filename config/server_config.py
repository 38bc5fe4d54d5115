"""ServerConfig model."""

from pydantic import BaseModel, Field

from .defaults import DEFAULT_HOST


class ServerConfig(BaseModel):
    """Transport selection: HTTP when a port is set, stdio otherwise."""

    host: str = Field(default=DEFAULT_HOST, description="HTTP bind address")
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="HTTP port (unset selects the stdio transport)",
    )
