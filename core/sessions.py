"""
Session store.

Owns the live sessions and their per-session permission policies. Every
mutating operation runs under one asyncio lock, so operations on the same
session never interleave, and lifecycle events are published in mutation
order.
"""

import asyncio
import logging
import os
import time
from typing import Any, Callable

from .events import SessionEvent, SessionEventBus, SessionEventType
from .exceptions import CapacityError, SessionExistsError
from .models import (
    SafetyMode,
    Session,
    SessionConfig,
    SessionMode,
    SessionSnapshot,
    gen_id,
)
from .permissions import DEFAULT_DECISION_RETENTION_SECONDS, PermissionPolicy

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_SESSIONS = 100
DEFAULT_SESSION_TIMEOUT_SECONDS = 1800  # 30 minutes
DEFAULT_CLEANUP_INTERVAL_SECONDS = 300  # 5 minutes


class SessionStore:
    """
    In-memory store of live sessions.

    Sessions are handed out as copies; callers mutate them only through the
    store's operations.
    """

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        session_timeout: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        default_working_directory: str | None = None,
        default_mode: SessionMode = SessionMode.DEFAULT,
        default_permission_mode: SafetyMode = SafetyMode.YOLO,
        policy_factory: Callable[[], PermissionPolicy] = PermissionPolicy,
        event_bus: SessionEventBus | None = None,
        clock: Callable[[], float] = time.time,
        decision_retention: float = DEFAULT_DECISION_RETENTION_SECONDS,
    ):
        """
        Initialize the session store.

        Args:
            max_sessions: Cap on live sessions
            session_timeout: Idle time in seconds after which a session expires
            cleanup_interval: Period of the background idle sweep in seconds
            default_working_directory: Working directory for new sessions (defaults to cwd)
            default_mode: Mode for sessions created without one
            default_permission_mode: Safety mode for sessions created without one
            policy_factory: Builds the permission policy owned by each session
            event_bus: Bus that receives lifecycle events
            clock: Time source for activity timestamps
            decision_retention: Age in seconds after which the sweep drops cached permission decisions
        """
        self.max_sessions = max_sessions
        self.session_timeout = session_timeout
        self.cleanup_interval = cleanup_interval
        self.default_working_directory = default_working_directory
        self.default_mode = default_mode
        self.default_permission_mode = default_permission_mode
        self.decision_retention = decision_retention
        self.events = event_bus or SessionEventBus()
        self._policy_factory = policy_factory
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._policies: dict[str, PermissionPolicy] = {}
        self._lock = asyncio.Lock()
        self._cleanup_task: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # =========================================================================
    # Internal helpers (callers hold the lock)
    # =========================================================================

    def _now(self) -> float:
        return self._clock()

    def _touch(self, session: Session) -> None:
        session.last_activity = max(session.last_activity, self._now())

    def _emit(self, event_type: SessionEventType, session_id: str, data: dict[str, Any]) -> None:
        self.events.publish(
            SessionEvent(type=event_type, session_id=session_id, timestamp=self._now(), data=data)
        )

    def _working_directory(self) -> str:
        return self.default_working_directory or os.getcwd()

    def _new_policy(self, mode: SessionMode) -> PermissionPolicy:
        policy = self._policy_factory()
        if not policy.set_mode(mode):
            logger.warning("Permission policy has no mode %s; keeping %s", mode.value, policy.current_mode)
        return policy

    def _ensure_capacity(self) -> None:
        if len(self._sessions) >= self.max_sessions:
            self._sweep_locked()
            if len(self._sessions) >= self.max_sessions:
                raise CapacityError(self.max_sessions)

    def _destroy_locked(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.is_active = False
        self._policies.pop(session_id, None)
        self._emit("destroyed", session_id, {"session": session.model_dump(mode="json")})
        logger.info("Session destroyed: %s", session_id)
        return True

    def _sweep_locked(self) -> list[str]:
        now = self._now()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.is_active or now - session.last_activity >= self.session_timeout
        ]
        for session_id in expired:
            self._destroy_locked(session_id)
        if expired:
            self._emit("timeout", "", {"expired_sessions": expired})
            logger.info("Evicted %d idle session(s)", len(expired))
        return expired

    # =========================================================================
    # Session CRUD
    # =========================================================================

    async def create_session(self, config: SessionConfig | None = None) -> str:
        """
        Create a new session.

        Args:
            config: Optional id, mode, working directory and safety mode

        Returns:
            The new session id

        Raises:
            CapacityError: If the cap is still reached after an idle sweep
            SessionExistsError: If an explicit id is already live
        """
        config = config or SessionConfig()

        async with self._lock:
            self._ensure_capacity()

            session_id = config.id or gen_id("ses_")
            if session_id in self._sessions:
                raise SessionExistsError(session_id)

            now = self._now()
            session = Session(
                id=session_id,
                mode=config.mode or self.default_mode,
                working_directory=config.working_directory or self._working_directory(),
                permission_mode=config.permission_mode or self.default_permission_mode,
                created_at=now,
                last_activity=now,
            )
            self._sessions[session_id] = session
            self._policies[session_id] = self._new_policy(session.mode)
            self._emit("created", session_id, {"session": session.model_dump(mode="json")})

        logger.info("Session created: %s (mode: %s)", session_id, session.mode.value)
        return session_id

    async def get_session(self, session_id: str) -> Session | None:
        """
        Get a snapshot copy of a session and mark it active.

        Returns:
            A copy of the session, or None if it does not exist
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            self._touch(session)
            return session.model_copy(deep=True)

    async def update_session(self, session_id: str, updates: SessionConfig | dict[str, Any]) -> bool:
        """
        Apply the fields present in ``updates``.

        A mode change is propagated to the session's permission policy and
        emits ``mode_changed`` after ``updated``. Unchanged fields emit nothing.

        Returns:
            False if the session does not exist
        """
        if isinstance(updates, dict):
            updates = SessionConfig.model_validate(updates)

        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False

            old_mode = session.mode
            changes: list[str] = []

            if updates.mode is not None and updates.mode != session.mode:
                session.mode = updates.mode
                self._policies[session_id].set_mode(updates.mode)
                changes.append(f"mode: {updates.mode.value}")

            if updates.working_directory and updates.working_directory != session.working_directory:
                session.working_directory = updates.working_directory
                changes.append(f"workingDirectory: {updates.working_directory}")

            if updates.permission_mode is not None and updates.permission_mode != session.permission_mode:
                session.permission_mode = updates.permission_mode
                changes.append(f"permissionMode: {updates.permission_mode.value}")

            self._touch(session)

            if changes:
                self._emit("updated", session_id, {"changes": changes})
                if old_mode != session.mode:
                    self._emit(
                        "mode_changed",
                        session_id,
                        {"old_mode": old_mode.value, "new_mode": session.mode.value},
                    )
                logger.info("Session updated: %s (%s)", session_id, ", ".join(changes))

        return True

    async def destroy_session(self, session_id: str) -> bool:
        """
        Destroy a session.

        Returns:
            False if the session did not exist
        """
        async with self._lock:
            return self._destroy_locked(session_id)

    async def destroy_all(self) -> int:
        """Destroy every live session and return how many were destroyed."""
        async with self._lock:
            return sum(1 for session_id in list(self._sessions) if self._destroy_locked(session_id))

    async def list_sessions(self) -> list[Session]:
        """List copies of all sessions, most recently active first."""
        async with self._lock:
            sessions = [session.model_copy(deep=True) for session in self._sessions.values()]
        return sorted(sessions, key=lambda s: s.last_activity, reverse=True)

    # =========================================================================
    # Session Actions
    # =========================================================================

    async def increment_tool_call(self, session_id: str) -> int:
        """
        Count one tool call against a session.

        Returns:
            The new count, or 0 if the session does not exist
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return 0
            session.tool_call_count += 1
            self._touch(session)
            return session.tool_call_count

    async def cancel_session(self, session_id: str) -> bool:
        """
        Mark a session cancelled so that later prompts fail fast.

        Returns:
            False if the session does not exist
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.cancelled = True
            self._touch(session)
        logger.info("Session cancelled: %s", session_id)
        return True

    async def check_tool_permission(self, session_id: str, tool_name: str) -> bool:
        """
        Ask the session's permission policy whether a tool may run.

        Returns:
            False if the session does not exist or the tool is not allowed
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.warning("Session not found: %s", session_id)
                return False
            self._touch(session)
            return self._policies[session_id].request_permission(tool_name)

    async def is_cancelled(self, session_id: str) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            return session is not None and session.cancelled

    def get_policy(self, session_id: str) -> PermissionPolicy | None:
        return self._policies.get(session_id)

    def available_modes(self) -> list[str]:
        """Names of the permission modes a session can switch to."""
        return [mode.name for mode in self._policy_factory().available_modes()]

    async def sweep_expired(self) -> list[str]:
        """
        Destroy inactive sessions and sessions idle for at least the timeout.

        Also purges permission decisions older than the retention window
        from the surviving sessions' policies.

        Returns:
            Ids of the evicted sessions
        """
        async with self._lock:
            expired = self._sweep_locked()
            purged = sum(policy.purge_expired(self.decision_retention) for policy in self._policies.values())
        if purged:
            logger.debug("Purged %d stale permission decision(s)", purged)
        return expired

    async def get_stats(self) -> dict[str, int]:
        """Summarize the store: total, active, expired and total tool calls."""
        async with self._lock:
            now = self._now()
            sessions = list(self._sessions.values())
            expired = sum(
                1 for s in sessions
                if not s.is_active or now - s.last_activity >= self.session_timeout
            )
            return {
                "total": len(sessions),
                "active": len(sessions) - expired,
                "expired": expired,
                "total_tool_calls": sum(s.tool_call_count for s in sessions),
            }

    # =========================================================================
    # Metadata
    # =========================================================================

    async def set_metadata(self, session_id: str, key: str, value: Any) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.metadata[key] = value
            self._touch(session)
            return True

    async def get_metadata(self, session_id: str, key: str, default: Any = None) -> Any:
        session = await self.get_session(session_id)
        if session is None:
            return default
        return session.metadata.get(key, default)

    async def get_all_metadata(self, session_id: str) -> dict[str, Any]:
        session = await self.get_session(session_id)
        if session is None:
            return {}
        return session.metadata

    # =========================================================================
    # Export / Import
    # =========================================================================

    async def export_session(self, session_id: str) -> dict[str, Any] | None:
        """
        Export a session as a plain, serializable snapshot.

        Returns:
            The snapshot dict (camelCase keys), or None if not found
        """
        session = await self.get_session(session_id)
        if session is None:
            return None
        return SessionSnapshot.from_session(session).to_dict()

    async def import_session(self, data: SessionSnapshot | dict[str, Any]) -> str:
        """
        Recreate a session from an exported snapshot.

        The imported session is always active and not cancelled. If the
        snapshot id is already live, a fresh id is assigned.

        Returns:
            The id of the imported session

        Raises:
            CapacityError: If the cap is still reached after an idle sweep
        """
        snapshot = data if isinstance(data, SessionSnapshot) else SessionSnapshot.model_validate(data)

        async with self._lock:
            self._ensure_capacity()

            session_id = snapshot.id or gen_id("ses_")
            if session_id in self._sessions:
                new_id = gen_id("ses_")
                logger.warning("Imported session id %s is live; importing as %s", session_id, new_id)
                session_id = new_id

            now = self._now()
            created_at = snapshot.created_at if snapshot.created_at is not None else now
            last_activity = snapshot.last_activity if snapshot.last_activity is not None else now
            session = Session(
                id=session_id,
                mode=snapshot.mode,
                working_directory=snapshot.working_directory or self._working_directory(),
                permission_mode=snapshot.permission_mode,
                created_at=created_at,
                last_activity=max(last_activity, created_at),
                tool_call_count=snapshot.tool_call_count,
                is_active=True,
                metadata=dict(snapshot.metadata),
            )
            self._sessions[session_id] = session
            self._policies[session_id] = self._new_policy(session.mode)
            self._emit(
                "created",
                session_id,
                {"session": session.model_dump(mode="json"), "imported": True},
            )

        logger.info("Session imported: %s", session_id)
        return session_id

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the periodic idle sweep on the running event loop."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())
        logger.debug("Session sweep started (every %ss)", self.cleanup_interval)

    async def stop(self) -> None:
        """Stop the periodic idle sweep."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Session sweep stopped")

    @property
    def running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            try:
                await self.sweep_expired()
            except Exception:
                logger.exception("Session cleanup failed")
