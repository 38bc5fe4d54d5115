"""
Protocol router.

Single entry point for inbound protocol messages. Every failure is turned
into an ``{"type": "error", "error": ...}`` record here, so a bad message
never takes the channel down.
"""

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from .exceptions import CoreError, InvalidMessageError, NotFoundError, ToolTimeoutError
from .model_registry import ModelRegistry
from .models import SessionConfig, ToolResult
from .protocol import (
    PROTOCOL_VERSION,
    Capabilities,
    ModelCommandRequest,
    ModelSummary,
    NewSessionRequest,
    PromptRequest,
    SessionRequest,
    SetModeRequest,
    TextResponse,
    ToolCallRequest,
    error_response,
)
from .sessions import SessionStore
from .tools import ToolConverter, ToolDispatcher

logger = logging.getLogger(__name__)

Handler = Callable[[Mapping[str, Any]], Awaitable[dict[str, Any]]]


def _validation_message(error: ValidationError) -> str:
    missing = [
        ".".join(str(part) for part in err["loc"])
        for err in error.errors()
        if err["type"] == "missing"
    ]
    if missing:
        return f"Missing required field(s): {', '.join(missing)}"
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid field {location}: {first['msg']}"


class ProtocolRouter:
    """Dispatches protocol messages to the session store, tools and models."""

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
        self._handlers: dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "new_session": self._handle_new_session,
            "prompt": self._handle_prompt,
            "tool_call": self._handle_tool_call,
            "model_command": self._handle_model_command,
            "list_models": self._handle_list_models,
            "cancel": self._handle_cancel,
            "set_mode": self._handle_set_mode,
            "end_session": self._handle_end_session,
        }

    @property
    def message_types(self) -> list[str]:
        return list(self._handlers)

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """
        Handle one inbound message.

        Args:
            message: Decoded message record

        Returns:
            The response record, or None if the message has no string ``type``
        """
        if not isinstance(message, Mapping) or not isinstance(message.get("type"), str):
            logger.warning("Ignoring message without a type: %.200r", message)
            return None

        message_type = message["type"]
        handler = self._handlers.get(message_type)
        if handler is None:
            logger.warning("Unknown message type: %s", message_type)
            return error_response(f"Unknown message type: {message_type}")

        logger.debug("Handling %s message", message_type)
        try:
            return await handler(message)
        except ValidationError as e:
            text = _validation_message(e)
            logger.warning("Invalid %s message: %s", message_type, text)
            return error_response(text)
        except CoreError as e:
            logger.warning("%s failed: %s", message_type, e)
            return error_response(str(e))
        except Exception as e:
            logger.exception("Unhandled error in %s handler", message_type)
            return error_response(f"Internal error: {e}")

    # =========================================================================
    # Handshake and sessions
    # =========================================================================

    async def _handle_initialize(self, message: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "type": "initialize_response",
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": Capabilities(supportedTools=self.converter.supported_tools()).model_dump(),
            "availableModels": self.models.available_model_names(),
            "permissionModes": self.sessions.available_modes(),
        }

    async def _handle_new_session(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = NewSessionRequest.model_validate(message)
        session_id = await self.sessions.create_session(
            SessionConfig(
                id=request.sessionId,
                mode=request.mode,
                working_directory=request.workingDirectory,
                permission_mode=request.permissionMode,
            )
        )
        return {"type": "new_session_response", "sessionId": session_id}

    async def _handle_cancel(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = SessionRequest.model_validate(message)
        if not await self.sessions.cancel_session(request.sessionId):
            raise NotFoundError("Session", request.sessionId)
        return {"type": "cancel_response", "sessionId": request.sessionId, "cancelled": True}

    async def _handle_set_mode(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = SetModeRequest.model_validate(message)
        if not await self.sessions.update_session(request.sessionId, SessionConfig(mode=request.mode)):
            raise NotFoundError("Session", request.sessionId)
        return {"type": "set_mode_response", "sessionId": request.sessionId, "mode": request.mode.value}

    async def _handle_end_session(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = SessionRequest.model_validate(message)
        destroyed = await self.sessions.destroy_session(request.sessionId)
        return {"type": "end_session_response", "sessionId": request.sessionId, "destroyed": destroyed}

    # =========================================================================
    # Prompts
    # =========================================================================

    async def _handle_prompt(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = PromptRequest.model_validate(message)

        session = await self.sessions.get_session(request.sessionId)
        if session is None:
            raise NotFoundError("Session", request.sessionId)
        if session.cancelled:
            return error_response("Session was cancelled")

        profile = self.models.resolve(request.modelName)
        try:
            text = await self.models.execute_with_model(request.prompt, profile.name)
        except Exception as e:
            logger.error("Model execution failed on %s: %s", profile.name, e)
            return error_response(f"Model execution failed: {e}")

        return {
            "type": "prompt_response",
            "sessionId": request.sessionId,
            "response": TextResponse(text=f"[{profile.name}] {text}", model=profile.name).model_dump(),
        }

    # =========================================================================
    # Tool calls
    # =========================================================================

    async def _handle_tool_call(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = ToolCallRequest.model_validate(message)
        session_id = request.sessionId
        tool_name = request.toolCall.name

        if await self.sessions.get_session(session_id) is None:
            raise NotFoundError("Session", session_id)

        call = self.converter.convert_to_internal(request.toolCall, strict=True)
        if call is None:
            return error_response(f"Unsupported tool: {tool_name}")

        if not await self.sessions.check_tool_permission(session_id, tool_name):
            self.converter.forget(call.id)
            policy = self.sessions.get_policy(session_id)
            decision = policy.get_decision(tool_name) if policy else None
            reason = decision.reason if decision else "session not found"
            logger.info("Tool %s denied for session %s: %s", tool_name, session_id, reason)
            denied = ToolResult(tool_use_id=call.id, content=f"Permission denied: {reason}", is_error=True)
            return {
                "type": "tool_call_response",
                "sessionId": session_id,
                "toolCallId": call.id,
                "result": denied.model_dump(),
            }

        if await self.sessions.increment_tool_call(session_id) == 0:
            self.converter.forget(call.id)
            raise NotFoundError("Session", session_id)

        try:
            result = await self.dispatcher.execute(call)
        except ToolTimeoutError:
            self.converter.forget(call.id)
            raise

        return {
            "type": "tool_call_response",
            "sessionId": session_id,
            "toolCallId": call.id,
            "result": self.converter.convert_result_to_external(result, call.name),
        }

    # =========================================================================
    # Models
    # =========================================================================

    async def _handle_model_command(self, message: Mapping[str, Any]) -> dict[str, Any]:
        request = ModelCommandRequest.model_validate(message)

        if request.command == "switch":
            if not request.modelName:
                raise InvalidMessageError("Missing modelName for switch command")
            if self.models.set_current_model(request.modelName):
                return {
                    "type": "model_response",
                    "success": True,
                    "message": f"Switched to model: {request.modelName}",
                    "currentModel": request.modelName,
                }
            return {
                "type": "model_response",
                "success": False,
                "message": f"Model not found: {request.modelName}",
                "availableModels": self.models.available_model_names(),
            }

        if request.command == "ask":
            if not request.modelName or not request.prompt:
                raise InvalidMessageError("Missing modelName or prompt for ask command")
            if self.models.get_profile(request.modelName) is None:
                return error_response(f"Model not found: {request.modelName}")
            try:
                text = await self.models.execute_with_model(request.prompt, request.modelName)
            except Exception as e:
                logger.error("Expert model call to %s failed: %s", request.modelName, e)
                return error_response(f"Expert model call failed: {e}")
            return {
                "type": "model_response",
                "success": True,
                "model": request.modelName,
                "response": text,
            }

        if request.command == "use":
            if request.purpose is None:
                raise InvalidMessageError("Missing purpose for use command")
            if not self.models.switch_to_purpose(request.purpose):
                return {
                    "type": "model_response",
                    "success": False,
                    "message": f"No model profile for purpose: {request.purpose}",
                    "availableModels": self.models.available_model_names(),
                }
            return {
                "type": "model_response",
                "success": True,
                "message": f"Switched to {request.purpose} model: {self.models.current_model}",
                "currentModel": self.models.current_model,
            }

        return error_response(f"Unknown model command: {request.command}")

    async def _handle_list_models(self, message: Mapping[str, Any]) -> dict[str, Any]:
        current = self.models.current_model
        return {
            "type": "models_response",
            "models": [
                ModelSummary(name=p.name, provider=p.provider, isCurrent=p.name == current).model_dump()
                for p in self.models.list_profiles()
            ],
            "currentModel": current,
        }
