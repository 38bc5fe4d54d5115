"""SessionsConfig model."""

from pydantic import BaseModel, Field

from core.models import SessionMode

from .defaults import (
    DEFAULT_CLEANUP_INTERVAL_SECONDS,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_SESSION_TIMEOUT_SECONDS,
)


class SessionsConfig(BaseModel):
    """Session store limits."""

    max_sessions: int = Field(
        default=DEFAULT_MAX_SESSIONS,
        ge=1,
        description="Maximum number of live sessions",
    )
    idle_timeout_seconds: float = Field(
        default=DEFAULT_SESSION_TIMEOUT_SECONDS,
        gt=0,
        description="Idle time after which a session is evicted",
    )
    cleanup_interval_seconds: float = Field(
        default=DEFAULT_CLEANUP_INTERVAL_SECONDS,
        gt=0,
        description="Period of the background idle sweep",
    )
    default_mode: SessionMode = Field(
        default=SessionMode.DEFAULT,
        description="Permission mode for sessions created without one",
    )
