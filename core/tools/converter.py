"""
Tool call conversion between the client protocol and the execution engine.

Forward conversion looks the external name up in the mapping table. The
mapping used for a call is remembered under the call id, so that the result
can be converted back with the exact rule that produced the call.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Iterable

from pydantic import ValidationError

from core.exceptions import InvalidMessageError
from core.models import ExternalToolCall, InternalToolCall, ToolResult, gen_id

from .mappings import DEFAULT_TOOL_MAPPINGS, ToolMapping

logger = logging.getLogger(__name__)

# Upper bound on remembered call id -> mapping entries
MAX_TRACKED_CALLS = 1024


class ToolConverter:
    """Bidirectional tool-call translator backed by a mapping table."""

    def __init__(
        self,
        mappings: Iterable[ToolMapping] | None = None,
        max_tracked_calls: int = MAX_TRACKED_CALLS,
    ):
        """
        Initialize the converter.

        Args:
            mappings: Initial mapping rules (defaults to DEFAULT_TOOL_MAPPINGS)
            max_tracked_calls: Bound on remembered in-flight call ids
        """
        self._forward: dict[str, ToolMapping] = {}
        self._inverse: dict[str, ToolMapping] = {}
        self._dispatched: OrderedDict[str, ToolMapping] = OrderedDict()
        self._max_tracked_calls = max_tracked_calls
        self._lock = threading.Lock()

        for mapping in DEFAULT_TOOL_MAPPINGS if mappings is None else mappings:
            self._register(mapping)

    # =========================================================================
    # Mapping table
    # =========================================================================

    def _register(self, mapping: ToolMapping) -> None:
        # Caller must hold the lock (or be the constructor).
        previous = self._forward.get(mapping.external_name)
        if previous is not None:
            self._inverse.pop(previous.internal_name, None)

        owner = self._inverse.get(mapping.internal_name)
        if owner is not None and owner.external_name != mapping.external_name:
            self._forward.pop(owner.external_name, None)

        self._forward[mapping.external_name] = mapping
        self._inverse[mapping.internal_name] = mapping

    def add_mapping(self, mapping: ToolMapping) -> None:
        """Register a mapping, replacing any entry for the same external or internal name."""
        with self._lock:
            self._register(mapping)
        logger.info("Added tool mapping: %s -> %s", mapping.external_name, mapping.internal_name)

    def remove_mapping(self, external_name: str) -> bool:
        """
        Remove the mapping for an external tool name.

        Returns:
            True if a mapping was removed, False if none existed
        """
        with self._lock:
            mapping = self._forward.pop(external_name, None)
            if mapping is None:
                return False
            if self._inverse.get(mapping.internal_name) is mapping:
                del self._inverse[mapping.internal_name]
        logger.info("Removed tool mapping: %s -> %s", external_name, mapping.internal_name)
        return True

    def get_mapping(self, external_name: str) -> ToolMapping | None:
        with self._lock:
            return self._forward.get(external_name)

    def get_mapping_for_internal(self, internal_name: str) -> ToolMapping | None:
        with self._lock:
            return self._inverse.get(internal_name)

    def supported_tools(self) -> list[str]:
        with self._lock:
            return list(self._forward)

    # =========================================================================
    # Conversion
    # =========================================================================

    def convert_to_internal(
        self, call: ExternalToolCall | dict[str, Any] | None, strict: bool = False
    ) -> InternalToolCall | None:
        """
        Translate an external tool call into the internal vocabulary.

        Args:
            call: External tool call (model or raw mapping)
            strict: Raise instead of returning None when a supported tool's
                input cannot be transformed

        Returns:
            The internal tool call, or None if the tool is unsupported or the
            call cannot be converted. Never raises unless ``strict`` is set.

        Raises:
            InvalidMessageError: In strict mode, if the input transform fails
        """
        if isinstance(call, dict):
            try:
                call = ExternalToolCall.model_validate(call)
            except ValidationError:
                logger.warning("Invalid tool call received: %r", call)
                return None

        if call is None or not call.name:
            logger.warning("Invalid tool call received: %r", call)
            return None

        mapping = self.get_mapping(call.name)
        if mapping is None:
            logger.warning("Unsupported tool: %s", call.name)
            return None

        payload = call.input if call.input is not None else {}
        try:
            internal_input = mapping.transform(payload) if mapping.transform else payload
        except Exception as e:
            logger.exception("Failed to convert tool %s", call.name)
            if strict:
                raise InvalidMessageError(f"Invalid input for tool {call.name}: {e}") from e
            return None

        call_id = call.id or gen_id("tool_")
        self._track(call_id, mapping)

        return InternalToolCall(name=mapping.internal_name, input=internal_input, id=call_id)

    def convert_result_to_external(
        self, result: ToolResult, internal_name: str | None = None
    ) -> Any:
        """
        Translate an internal tool result back into external form.

        The originating mapping is recovered from the call id recorded during
        forward conversion; ``internal_name`` is only consulted when no record
        exists and is matched exactly.

        Args:
            result: The internal tool result
            internal_name: Internal tool name the call was dispatched for

        Returns:
            The reverse-transformed result, or the canonical
            ``{type, tool_use_id, content, is_error}`` envelope
        """
        with self._lock:
            mapping = self._dispatched.pop(result.tool_use_id, None)
            if mapping is None and internal_name:
                mapping = self._inverse.get(internal_name)

        envelope = {
            "type": "tool_result",
            "tool_use_id": result.tool_use_id,
            "content": result.content,
            "is_error": result.is_error,
        }

        if mapping is not None and mapping.reverse_transform is not None:
            try:
                return mapping.reverse_transform(envelope)
            except Exception:
                logger.exception("Failed to convert tool result for %s", mapping.external_name)

        return envelope

    def forget(self, call_id: str) -> None:
        """Release the recorded mapping for a call that will not produce a result."""
        with self._lock:
            self._dispatched.pop(call_id, None)

    def tracked_count(self) -> int:
        with self._lock:
            return len(self._dispatched)

    def _track(self, call_id: str, mapping: ToolMapping) -> None:
        with self._lock:
            self._dispatched[call_id] = mapping
            self._dispatched.move_to_end(call_id)
            while len(self._dispatched) > self._max_tracked_calls:
                dropped, _ = self._dispatched.popitem(last=False)
                logger.debug("Dropped stale tool call record: %s", dropped)
