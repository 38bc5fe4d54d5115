"""
Permission system for tool execution.

Provides mode-based auto-approve/auto-deny policies with a mode-scoped
decision cache.
"""

from .models import WILDCARD, PermissionDecision, PermissionMode
from .modes import BUILTIN_MODES, DEFAULT_MODE_NAME
from .patterns import match_pattern, matches_any
from .policy import (
    DEFAULT_DECISION_RETENTION_SECONDS,
    REASON_AUTO_APPROVED,
    REASON_AUTO_DENIED,
    REASON_REQUIRES_APPROVAL,
    PermissionPolicy,
)

__all__ = [
    # Models
    "PermissionMode",
    "PermissionDecision",
    "WILDCARD",
    # Modes
    "BUILTIN_MODES",
    "DEFAULT_MODE_NAME",
    # Functions
    "match_pattern",
    "matches_any",
    # Policy
    "PermissionPolicy",
    "DEFAULT_DECISION_RETENTION_SECONDS",
    "REASON_AUTO_APPROVED",
    "REASON_AUTO_DENIED",
    "REASON_REQUIRES_APPROVAL",
]
