"""Tests for protocol message routing."""

import pytest

from core import AdapterContext, ModelRegistry, ToolConverter, ToolDispatcher


async def _new_session(context, **fields) -> str:
    response = await context.handle_message({"type": "new_session", **fields})
    assert response["type"] == "new_session_response"
    return response["sessionId"]


class TestEnvelope:
    """Tests for message envelope handling."""

    @pytest.mark.asyncio
    async def test_message_without_type(self, context):
        """Messages without a string type produce no response."""
        assert await context.handle_message({"sessionId": "x"}) is None
        assert await context.handle_message({"type": 42}) is None
        assert await context.handle_message(["not", "a", "record"]) is None

    @pytest.mark.asyncio
    async def test_unknown_type(self, context):
        """Unknown types produce an error record."""
        response = await context.handle_message({"type": "teleport"})
        assert response == {"type": "error", "error": "Unknown message type: teleport"}

    @pytest.mark.asyncio
    async def test_missing_fields(self, context):
        """Missing required fields are named in the error."""
        response = await context.handle_message({"type": "prompt"})
        assert response == {"type": "error", "error": "Missing required field(s): sessionId, prompt"}

    @pytest.mark.asyncio
    async def test_invalid_field(self, context):
        """Invalid field values produce an error naming the field."""
        session_id = await _new_session(context)
        response = await context.handle_message({"type": "set_mode", "sessionId": session_id, "mode": "turbo"})
        assert response["type"] == "error"
        assert response["error"].startswith("Invalid field mode:")

    @pytest.mark.asyncio
    async def test_initialize(self, context):
        """initialize reports version, capabilities, models and modes."""
        response = await context.handle_message({"type": "initialize"})

        assert response["type"] == "initialize_response"
        assert response["protocolVersion"] == 1
        assert response["capabilities"]["tools"] is True
        assert "read_file" in response["capabilities"]["supportedTools"]
        assert "claude-sonnet" in response["availableModels"]
        assert set(response["permissionModes"]) == {"default", "accept_edits", "bypass_permissions", "plan"}


class TestSessions:
    """Tests for session lifecycle messages."""

    @pytest.mark.asyncio
    async def test_new_session_with_settings(self, context):
        """new_session honors the requested mode and directory."""
        session_id = await _new_session(context, mode="plan", workingDirectory="/srv", permissionMode="safe")
        session = await context.sessions.get_session(session_id)

        assert session.mode.value == "plan"
        assert session.working_directory == "/srv"
        assert session.permission_mode.value == "safe"

    @pytest.mark.asyncio
    async def test_new_session_over_capacity(self, context):
        """Creating past the cap yields an error record."""
        for _ in range(3):
            await _new_session(context)
        response = await context.handle_message({"type": "new_session"})
        assert response == {"type": "error", "error": "Maximum session limit (3) reached"}

    @pytest.mark.asyncio
    async def test_set_mode(self, context):
        """set_mode switches the session's permission mode."""
        session_id = await _new_session(context)
        response = await context.handle_message(
            {"type": "set_mode", "sessionId": session_id, "mode": "bypass_permissions"}
        )

        assert response == {"type": "set_mode_response", "sessionId": session_id, "mode": "bypass_permissions"}
        assert context.sessions.get_policy(session_id).current_mode == "bypass_permissions"

    @pytest.mark.asyncio
    async def test_set_mode_unknown_session(self, context):
        """set_mode on a missing session is an error."""
        response = await context.handle_message({"type": "set_mode", "sessionId": "nope", "mode": "plan"})
        assert response == {"type": "error", "error": "Session not found: nope"}

    @pytest.mark.asyncio
    async def test_end_session(self, context):
        """end_session destroys the session."""
        session_id = await _new_session(context)
        response = await context.handle_message({"type": "end_session", "sessionId": session_id})

        assert response == {"type": "end_session_response", "sessionId": session_id, "destroyed": True}
        assert session_id not in context.sessions

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, context):
        """cancel on a missing session is an error."""
        response = await context.handle_message({"type": "cancel", "sessionId": "nope"})
        assert response["type"] == "error"


class TestPrompt:
    """Tests for prompt messages."""

    @pytest.mark.asyncio
    async def test_prompt_uses_current_model(self, context):
        """Prompts run on the current model and are tagged with its name."""
        session_id = await _new_session(context)
        response = await context.handle_message({"type": "prompt", "sessionId": session_id, "prompt": "hi"})

        assert response["type"] == "prompt_response"
        assert response["response"] == {
            "type": "text",
            "text": "[claude-sonnet] claude-sonnet says: hi",
            "model": "claude-sonnet",
        }

    @pytest.mark.asyncio
    async def test_prompt_explicit_model(self, context):
        """An explicit modelName overrides the current model."""
        session_id = await _new_session(context)
        response = await context.handle_message(
            {"type": "prompt", "sessionId": session_id, "prompt": "hi", "modelName": "gpt-4o"}
        )
        assert response["response"]["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_prompt_unknown_session(self, context):
        """Prompts against a missing session fail."""
        response = await context.handle_message({"type": "prompt", "sessionId": "nope", "prompt": "hi"})
        assert response == {"type": "error", "error": "Session not found: nope"}

    @pytest.mark.asyncio
    async def test_prompt_on_cancelled_session(self, context, invoker):
        """A cancelled session fails fast without calling the model."""
        session_id = await _new_session(context)
        cancelled = await context.handle_message({"type": "cancel", "sessionId": session_id})
        assert cancelled["type"] == "cancel_response"

        response = await context.handle_message({"type": "prompt", "sessionId": session_id, "prompt": "hi"})

        assert response == {"type": "error", "error": "Session was cancelled"}
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_prompt_model_failure(self, store, executor, make_invoker):
        """Invoker failures become an error record."""
        context = AdapterContext(
            sessions=store,
            converter=ToolConverter(),
            dispatcher=ToolDispatcher(executor),
            models=ModelRegistry(make_invoker(failures={"claude-sonnet"})),
        )
        session_id = await _new_session(context)
        response = await context.handle_message({"type": "prompt", "sessionId": session_id, "prompt": "hi"})
        assert response == {"type": "error", "error": "Model execution failed: claude-sonnet is unavailable"}


class TestToolCall:
    """Tests for tool_call messages."""

    @pytest.mark.asyncio
    async def test_read_file_in_default_mode(self, context, executor):
        """An approved tool is converted, counted and executed."""
        session_id = await _new_session(context)
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "read_file", "input": {"path": "/tmp/a.txt"}, "id": "call-1"},
        })

        assert response["type"] == "tool_call_response"
        assert response["toolCallId"] == "call-1"
        assert response["result"] == {
            "type": "tool_result",
            "tool_use_id": "call-1",
            "content": "ran FileRead",
            "is_error": False,
        }
        assert executor.calls[0].name == "FileRead"
        assert executor.calls[0].input == {"abs_path": "/tmp/a.txt", "file_path": "/tmp/a.txt"}
        assert (await context.sessions.get_session(session_id)).tool_call_count == 1
        assert context.converter.tracked_count() == 0

    @pytest.mark.asyncio
    async def test_generated_call_id(self, context):
        """A call without an id gets one."""
        session_id = await _new_session(context)
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "glob", "input": {"pattern": "*.py"}},
        })
        assert response["toolCallId"].startswith("tool_")

    @pytest.mark.asyncio
    async def test_denied_write(self, context, executor):
        """A denied tool is never executed or counted."""
        session_id = await _new_session(context)
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "write_file", "input": {"path": "/x", "content": "y"}, "id": "w1"},
        })

        assert response["type"] == "tool_call_response"
        assert response["result"]["is_error"] is True
        assert response["result"]["content"] == "Permission denied: auto-denied by mode"
        assert executor.calls == []
        assert (await context.sessions.get_session(session_id)).tool_call_count == 0
        assert context.converter.tracked_count() == 0

    @pytest.mark.asyncio
    async def test_unsupported_tool(self, context, executor):
        """Unmapped tools are reported as unsupported."""
        session_id = await _new_session(context)
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "launch_rocket", "input": {}},
        })

        assert response == {"type": "error", "error": "Unsupported tool: launch_rocket"}
        assert executor.calls == []

    @pytest.mark.asyncio
    async def test_malformed_input_for_supported_tool(self, context, executor):
        """A supported tool with unusable input is reported as invalid, not unsupported."""
        session_id = await _new_session(context)
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "read_file", "input": "/x"},
        })

        assert response == {
            "type": "error",
            "error": "Invalid input for tool read_file: 'str' object has no attribute 'get'",
        }
        assert executor.calls == []
        assert context.converter.tracked_count() == 0
        assert (await context.sessions.get_session(session_id)).tool_call_count == 0

    @pytest.mark.asyncio
    async def test_unknown_session(self, context):
        """Tool calls against a missing session fail."""
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": "nope",
            "toolCall": {"name": "read_file", "input": {"path": "/x"}},
        })
        assert response == {"type": "error", "error": "Session not found: nope"}

    @pytest.mark.asyncio
    async def test_timeout(self, store, make_executor, registry):
        """A tool past its deadline becomes an error record."""
        context = AdapterContext(
            sessions=store,
            converter=ToolConverter(),
            dispatcher=ToolDispatcher(make_executor(delay=10), timeout=0.05),
            models=registry,
        )
        session_id = await _new_session(context, mode="bypass_permissions")
        response = await context.handle_message({
            "type": "tool_call",
            "sessionId": session_id,
            "toolCall": {"name": "run_command", "input": {"command": "sleep 100"}, "id": "slow"},
        })

        assert response["type"] == "error"
        assert response["error"].startswith("Tool execution timeout: Bash")
        assert context.converter.tracked_count() == 0


class TestModelCommands:
    """Tests for model_command and list_models messages."""

    @pytest.mark.asyncio
    async def test_switch(self, context):
        """switch changes the current model."""
        response = await context.handle_message({"type": "model_command", "command": "switch", "modelName": "gpt-4"})

        assert response["success"] is True
        assert response["currentModel"] == "gpt-4"
        assert context.models.current_model == "gpt-4"

    @pytest.mark.asyncio
    async def test_switch_unknown(self, context):
        """switch to an unknown model reports the available models."""
        response = await context.handle_message(
            {"type": "model_command", "command": "switch", "modelName": "nonexistent"}
        )

        assert response["success"] is False
        assert response["message"] == "Model not found: nonexistent"
        assert "claude-sonnet" in response["availableModels"]
        assert context.models.current_model == "claude-sonnet"

    @pytest.mark.asyncio
    async def test_switch_without_model_name(self, context):
        response = await context.handle_message({"type": "model_command", "command": "switch"})

        assert response == {"type": "error", "error": "Missing modelName for switch command"}
        assert context.models.current_model == "claude-sonnet"

    @pytest.mark.asyncio
    async def test_ask(self, context):
        """ask runs one prompt without changing the current model."""
        response = await context.handle_message(
            {"type": "model_command", "command": "ask", "modelName": "gpt-4", "prompt": "why?"}
        )

        assert response == {"type": "model_response", "success": True, "model": "gpt-4", "response": "gpt-4 says: why?"}
        assert context.models.current_model == "claude-sonnet"

    @pytest.mark.asyncio
    async def test_ask_missing_fields(self, context):
        """ask needs a model name and a prompt."""
        response = await context.handle_message({"type": "model_command", "command": "ask", "modelName": "gpt-4"})
        assert response == {"type": "error", "error": "Missing modelName or prompt for ask command"}

    @pytest.mark.asyncio
    async def test_ask_unknown_model(self, context):
        """ask with an unknown model is an error."""
        response = await context.handle_message(
            {"type": "model_command", "command": "ask", "modelName": "ghost", "prompt": "?"}
        )
        assert response == {"type": "error", "error": "Model not found: ghost"}

    @pytest.mark.asyncio
    async def test_use_purpose(self, context):
        """use switches to the model behind a purpose pointer."""
        response = await context.handle_message({"type": "model_command", "command": "use", "purpose": "quick"})

        assert response["success"] is True
        assert response["currentModel"] == "claude-haiku"

    @pytest.mark.asyncio
    async def test_unknown_command(self, context):
        """Unknown commands are reported."""
        response = await context.handle_message({"type": "model_command", "command": "explode"})
        assert response == {"type": "error", "error": "Unknown model command: explode"}

    @pytest.mark.asyncio
    async def test_list_models(self, context):
        """list_models flags exactly the current model."""
        response = await context.handle_message({"type": "list_models"})

        assert response["type"] == "models_response"
        assert response["currentModel"] == "claude-sonnet"
        current = [m["name"] for m in response["models"] if m["isCurrent"]]
        assert current == ["claude-sonnet"]
        assert len(response["models"]) == 6


class TestContextLifecycle:
    """Tests for AdapterContext start and stop."""

    @pytest.mark.asyncio
    async def test_async_context_manager(self, context):
        """Leaving the context stops the sweep and destroys sessions."""
        async with context:
            assert context.started
            assert context.sessions.running
            await _new_session(context)

        assert not context.started
        assert not context.sessions.running
        assert len(context.sessions) == 0
