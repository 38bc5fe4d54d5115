"""Main Config model."""

from pydantic import BaseModel, Field, field_validator

from core.models import SafetyMode

from .defaults import DEFAULT_LOG_LEVEL, LOG_LEVELS
from .models_config import ModelsConfig
from .server_config import ServerConfig
from .sessions_config import SessionsConfig
from .tools_config import ToolsConfig


class Config(BaseModel):
    """Main configuration model."""

    working_directory: str | None = Field(
        default=None,
        description="Working directory for new sessions (defaults to the process cwd)",
    )
    permission_mode: SafetyMode = Field(
        default=SafetyMode.YOLO,
        description="Default safety mode for new sessions",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        description="Root log level",
    )
    sessions: SessionsConfig = Field(
        default_factory=SessionsConfig,
        description="Session store limits",
    )
    tools: ToolsConfig = Field(
        default_factory=ToolsConfig,
        description="Tool execution limits",
    )
    models: ModelsConfig = Field(
        default_factory=ModelsConfig,
        description="Model profiles and invoker backend",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Transport settings",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level
