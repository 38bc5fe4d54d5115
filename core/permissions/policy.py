"""Permission policy: mode state machine plus a mode-scoped decision cache."""

import logging
import threading
import time
from enum import Enum
from typing import Callable

from core.exceptions import NotFoundError

from .models import PermissionDecision, PermissionMode
from .modes import BUILTIN_MODES, DEFAULT_MODE_NAME
from .patterns import matches_any

logger = logging.getLogger(__name__)

# Default retention for cached decisions (1 hour)
DEFAULT_DECISION_RETENTION_SECONDS = 3600

REASON_AUTO_APPROVED = "auto-approved by mode"
REASON_AUTO_DENIED = "auto-denied by mode"
REASON_REQUIRES_APPROVAL = "requires explicit approval"


def _mode_name(mode: str | Enum) -> str:
    return mode.value if isinstance(mode, Enum) else mode


class PermissionPolicy:
    """
    Decides whether a tool may run under the active permission mode.

    The only state transition is an explicit ``set_mode``. Every switch clears
    the decision cache, so decisions never carry over from a previous mode.
    The policy never blocks waiting for a human: a tool that no rule covers is
    denied with the reason "requires explicit approval".
    """

    def __init__(
        self,
        mode: str | Enum = DEFAULT_MODE_NAME,
        modes: dict[str, PermissionMode] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the policy.

        Args:
            mode: Initial mode name
            modes: Available modes (defaults to the built-in modes)
            clock: Time source for decision timestamps

        Raises:
            NotFoundError: If the initial mode is unknown
        """
        self._modes: dict[str, PermissionMode] = dict(modes if modes is not None else BUILTIN_MODES)
        name = _mode_name(mode)
        if name not in self._modes:
            raise NotFoundError("Permission mode", name)
        self._current = name
        self._clock = clock
        self._decisions: dict[str, PermissionDecision] = {}
        self._lock = threading.Lock()

    @property
    def current_mode(self) -> str:
        return self._current

    def available_modes(self) -> list[PermissionMode]:
        return list(self._modes.values())

    def register_mode(self, mode: PermissionMode) -> None:
        """Add or replace a mode definition."""
        with self._lock:
            self._modes[mode.name] = mode
            if mode.name == self._current:
                self._decisions.clear()
        logger.info("Registered permission mode: %s", mode.name)

    def set_mode(self, mode: str | Enum) -> bool:
        """
        Switch the active mode.

        Args:
            mode: Target mode name

        Returns:
            False if the mode is unknown (state untouched), True otherwise
        """
        name = _mode_name(mode)
        with self._lock:
            if name not in self._modes:
                logger.warning("Unknown permission mode: %s", name)
                return False
            self._current = name
            self._decisions.clear()
        logger.debug("Permission mode changed to: %s", name)
        return True

    def request_permission(self, tool_name: str) -> bool:
        """
        Decide whether ``tool_name`` may run and record the decision.

        Auto-approve rules take precedence over auto-deny rules.

        Args:
            tool_name: External tool name

        Returns:
            True if the tool is allowed to run
        """
        with self._lock:
            mode = self._modes[self._current]
            if matches_any(mode.auto_approve, tool_name):
                allowed, reason = True, REASON_AUTO_APPROVED
            elif matches_any(mode.auto_deny, tool_name):
                allowed, reason = False, REASON_AUTO_DENIED
            else:
                allowed, reason = False, REASON_REQUIRES_APPROVAL
            self._decisions[tool_name] = PermissionDecision(
                tool_name=tool_name,
                allowed=allowed,
                reason=reason,
                timestamp=self._clock(),
            )

        logger.debug("Permission for %s under %s: %s (%s)", tool_name, mode.name, allowed, reason)
        return allowed

    def get_decision(self, tool_name: str) -> PermissionDecision | None:
        with self._lock:
            return self._decisions.get(tool_name)

    def decisions(self) -> list[PermissionDecision]:
        with self._lock:
            return list(self._decisions.values())

    def purge_expired(self, retention: float = DEFAULT_DECISION_RETENTION_SECONDS) -> int:
        """
        Drop cached decisions older than ``retention`` seconds.

        The cache is not an audit log; purged entries are simply re-decided on
        the next request.

        Returns:
            Number of purged decisions
        """
        now = self._clock()
        with self._lock:
            expired = [
                name for name, decision in self._decisions.items()
                if now - decision.timestamp > retention
            ]
            for name in expired:
                del self._decisions[name]
        return len(expired)
