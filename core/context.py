"""
Adapter context.

Owns every core component for one running adapter. The entry point builds
exactly one context, starts it, hands it to a transport and stops it on the
way out. Nothing in the core is held in module globals.
"""

import logging
from typing import Any

from .collaborators import ModelInvoker, ToolExecutor
from .model_registry import ModelRegistry
from .models import SessionMode
from .router import ProtocolRouter
from .sessions import SessionStore
from .tools import ToolConverter, ToolDispatcher

logger = logging.getLogger(__name__)


class AdapterContext:
    def __init__(
        self,
        sessions: SessionStore,
        converter: ToolConverter,
        dispatcher: ToolDispatcher,
        models: ModelRegistry,
    ):
        self.sessions = sessions
        self.converter = converter
        self.dispatcher = dispatcher
        self.models = models
        self.router = ProtocolRouter(sessions, converter, dispatcher, models)
        self._started = False

    @classmethod
    def from_config(
        cls,
        config: Any,
        executor: ToolExecutor,
        invoker: ModelInvoker,
    ) -> "AdapterContext":
        """
        Build a context from a loaded ``Config``.

        Args:
            config: Adapter configuration
            executor: Tool execution collaborator
            invoker: Model invocation collaborator
        """
        sessions = SessionStore(
            max_sessions=config.sessions.max_sessions,
            session_timeout=config.sessions.idle_timeout_seconds,
            cleanup_interval=config.sessions.cleanup_interval_seconds,
            default_working_directory=config.working_directory,
            default_mode=SessionMode(config.sessions.default_mode),
            default_permission_mode=config.permission_mode,
            decision_retention=config.tools.decision_retention_seconds,
        )
        return cls(
            sessions=sessions,
            converter=ToolConverter(),
            dispatcher=ToolDispatcher(executor, timeout=config.tools.execution_timeout_seconds),
            models=ModelRegistry.from_config(config.models, invoker),
        )

    @property
    def started(self) -> bool:
        return self._started

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        return await self.router.handle_message(message)

    async def start(self) -> None:
        """Start background work (the idle sweep)."""
        if self._started:
            return
        self.sessions.start()
        self._started = True
        logger.info("Adapter started (model: %s)", self.models.current_model)

    async def stop(self) -> None:
        """Stop the sweep, destroy every session and cancel pending tool calls."""
        if not self._started:
            return
        self._started = False
        await self.sessions.stop()
        destroyed = await self.sessions.destroy_all()
        await self.dispatcher.shutdown()
        logger.info("Adapter stopped (%d session(s) closed)", destroyed)

    async def __aenter__(self) -> "AdapterContext":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
