"""
Session event types and the SessionEventBus.

The bus is a small publish/subscribe capability that the session store owns by
composition. Delivery is synchronous and happens in the order events are
published, so listeners observe store mutations in the order they occurred.
"""

import logging
import threading
import time
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SessionEventType = Literal["created", "updated", "destroyed", "timeout", "mode_changed"]


class SessionEvent(BaseModel):
    """Lifecycle notification emitted by the session store."""

    type: SessionEventType
    session_id: str
    timestamp: float = Field(default_factory=time.time)
    data: dict[str, Any] = Field(default_factory=dict)


SessionListener = Callable[[SessionEvent], None]


class SessionEventBus:
    """Synchronous, ordered event delivery to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Callable invoked with every published event

        Returns:
            A callable that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, event: SessionEvent) -> None:
        """Deliver an event to every listener in registration order."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Session event listener failed for %s event", event.type)

    def listener_count(self) -> int:
        return len(self._listeners)

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()
