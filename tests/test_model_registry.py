"""Tests for the model registry."""

import time

import pytest

from core import DEFAULT_MODEL_PROFILES, ModelProfile, ModelRegistry
from core.exceptions import InvalidOperationError, NotFoundError
from core.models import ModelPointers, ParallelRequest


class TestDefaults:
    """Tests for the built-in profiles and pointers."""

    def test_builtin_profiles(self, registry):
        """All six built-in profiles are registered."""
        assert set(registry.available_model_names()) == {
            "claude-sonnet", "claude-haiku", "gpt-4", "gpt-4o", "qwen-coder", "gemini-pro",
        }

    def test_builtin_pointers(self, registry):
        """Pointers default to the documented assignment and current is main."""
        pointers = registry.get_pointers()
        assert pointers.main == "claude-sonnet"
        assert pointers.task == "qwen-coder"
        assert pointers.reasoning == "gpt-4"
        assert pointers.quick == "claude-haiku"
        assert registry.current_model == "claude-sonnet"

    def test_defaults_are_not_shared(self, invoker):
        """Mutating one registry's profiles never touches the defaults."""
        registry = ModelRegistry(invoker)
        registry.get_profile("gpt-4").temperature = 1.5
        assert DEFAULT_MODEL_PROFILES[2].temperature == 0.3

    def test_unknown_pointer_rejected_at_construction(self, invoker):
        """A pointer naming a missing profile fails eagerly."""
        pointers = ModelPointers(main="nope", task="nope", reasoning="nope", quick="nope")
        with pytest.raises(NotFoundError):
            ModelRegistry(invoker, pointers=pointers)

    def test_unknown_current_falls_back_to_main(self, invoker):
        """An unknown initial current model falls back to the main pointer."""
        registry = ModelRegistry(invoker, current="ghost")
        assert registry.current_model == "claude-sonnet"


class TestCurrentModel:
    """Tests for switching the current model."""

    def test_switch_known(self, registry):
        """Switching to a known profile succeeds."""
        assert registry.set_current_model("gpt-4o") is True
        assert registry.current_model == "gpt-4o"
        assert registry.current_profile().provider == "openai"

    def test_switch_unknown_keeps_current(self, registry):
        """Switching to an unknown profile fails without changing state."""
        assert registry.set_current_model("nonexistent") is False
        assert registry.current_model == "claude-sonnet"

    def test_switch_to_purpose(self, registry):
        """A purpose switch moves current to the pointed profile."""
        assert registry.switch_to_purpose("reasoning") is True
        assert registry.current_model == "gpt-4"


class TestPointers:
    """Tests for purpose pointer management."""

    def test_set_pointers(self, registry):
        """Pointers can be reassigned to known profiles."""
        registry.set_pointers(quick="gpt-4o")
        assert registry.profile_for_purpose("quick").name == "gpt-4o"

    def test_set_pointer_unknown_profile(self, registry):
        """Assigning an unknown profile fails and applies nothing."""
        with pytest.raises(NotFoundError):
            registry.set_pointers(main="gpt-4o", task="ghost")
        assert registry.get_pointers().main == "claude-sonnet"

    def test_set_pointer_unknown_purpose(self, registry):
        """Unknown purposes are rejected."""
        with pytest.raises(InvalidOperationError):
            registry.set_pointers(coding="gpt-4o")

    def test_removed_profile_fails_at_use(self, registry):
        """Removing a pointed-to profile surfaces as NotFound on resolution."""
        assert registry.remove_profile("qwen-coder") is True

        with pytest.raises(NotFoundError):
            registry.profile_for_purpose("task")
        assert registry.switch_to_purpose("task") is False

    def test_remove_unknown(self, registry):
        """Removing an unknown profile reports False."""
        assert registry.remove_profile("ghost") is False


class TestExecute:
    """Tests for prompt dispatch."""

    @pytest.mark.asyncio
    async def test_executes_on_current(self, registry, invoker):
        """Without a name, the current model runs the prompt."""
        response = await registry.execute_with_model("hello")
        assert response == "claude-sonnet says: hello"
        assert invoker.calls == [("claude-sonnet", "hello")]

    @pytest.mark.asyncio
    async def test_executes_on_named(self, registry):
        """An explicit name overrides the current model."""
        assert await registry.execute_with_model("hi", "gemini-pro") == "gemini-pro says: hi"

    @pytest.mark.asyncio
    async def test_unknown_model(self, registry, invoker):
        """An unknown profile raises before the invoker is called."""
        with pytest.raises(NotFoundError):
            await registry.execute_with_model("hi", "ghost")
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_invoker_failure_propagates(self, make_invoker):
        """Invoker failures are not retried or swallowed."""
        registry = ModelRegistry(make_invoker(failures={"claude-sonnet"}))
        with pytest.raises(RuntimeError, match="unavailable"):
            await registry.execute_with_model("hi")


class TestParallel:
    """Tests for parallel batches."""

    @pytest.mark.asyncio
    async def test_batch_runs_concurrently_with_isolated_failure(self, make_invoker):
        """One failure never aborts the batch and the batch is not serialized."""
        invoker = make_invoker(
            delays={"claude-sonnet": 0.2, "gpt-4": 0.2, "gemini-pro": 0.2},
            failures={"gpt-4"},
        )
        registry = ModelRegistry(invoker)

        started = time.monotonic()
        results = await registry.execute_in_parallel([
            {"prompt": "a", "model_name": "claude-sonnet"},
            ParallelRequest(prompt="b", model_name="gpt-4"),
            {"prompt": "c", "model_name": "gemini-pro"},
        ])
        elapsed = time.monotonic() - started

        assert [r.model for r in results] == ["claude-sonnet", "gpt-4", "gemini-pro"]
        assert results[0].response == "claude-sonnet says: a"
        assert results[0].error is None
        assert results[1].error == "gpt-4 is unavailable"
        assert results[1].response == ""
        assert results[2].response == "gemini-pro says: c"
        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_purpose_and_default_resolution(self, registry):
        """Requests fall back to their purpose pointer, then the current model."""
        results = await registry.execute_in_parallel([
            {"prompt": "p", "purpose": "quick"},
            {"prompt": "q"},
        ])
        assert [r.model for r in results] == ["claude-haiku", "claude-sonnet"]

    @pytest.mark.asyncio
    async def test_unknown_model_is_per_request_error(self, registry):
        """An unknown model only fails its own entry."""
        results = await registry.execute_in_parallel([
            {"prompt": "x", "model_name": "ghost"},
            {"prompt": "y", "model_name": "gpt-4o"},
        ])
        assert results[0].error == "Model profile not found: ghost"
        assert results[1].response == "gpt-4o says: y"

    @pytest.mark.asyncio
    async def test_malformed_entry_is_per_request_error(self, registry):
        """An entry that fails validation only fails its own slot."""
        results = await registry.execute_in_parallel([
            {"prompt": "a"},
            {"model_name": "claude-haiku"},
            {"prompt": "c"},
        ])

        assert len(results) == 3
        assert results[0].response == "claude-sonnet says: a"
        assert results[1].model == "claude-haiku"
        assert results[1].error == "Invalid request: prompt: Field required"
        assert results[1].response == ""
        assert results[2].response == "claude-sonnet says: c"

    @pytest.mark.asyncio
    async def test_non_mapping_entry(self, registry):
        results = await registry.execute_in_parallel([None])
        assert results[0].model == ""
        assert results[0].error.startswith("Invalid request: request:")

    @pytest.mark.asyncio
    async def test_empty_batch(self, registry):
        """An empty batch yields no results."""
        assert await registry.execute_in_parallel([]) == []


class TestExportImport:
    """Tests for registry configuration export and import."""

    def test_export_shape(self, registry):
        """Exports carry profiles, pointers and the current model."""
        exported = registry.export_config()
        assert set(exported) == {"modelProfiles", "modelPointers", "currentModel"}
        assert exported["currentModel"] == "claude-sonnet"
        assert exported["modelProfiles"]["gpt-4"]["provider"] == "openai"

    def test_round_trip(self, registry, invoker):
        """A second registry imports an export unchanged."""
        registry.add_profile(ModelProfile(name="local", provider="ollama", model="llama3"))
        registry.set_pointers(quick="local")
        registry.set_current_model("local")

        other = ModelRegistry(invoker)
        other.import_config(registry.export_config())

        assert other.get_profile("local").model == "llama3"
        assert other.get_pointers().quick == "local"
        assert other.current_model == "local"

    def test_import_ignores_unknown_current(self, registry):
        """An unknown currentModel in an import is ignored."""
        registry.import_config({"currentModel": "ghost"})
        assert registry.current_model == "claude-sonnet"

    def test_import_with_dangling_pointer_applies_nothing(self, registry):
        """A failed import leaves profiles, pointers and current model untouched."""
        before = registry.export_config()
        incoming = {
            "modelProfiles": {"local": {"provider": "ollama", "model": "llama3"}},
            "modelPointers": {"main": "local", "task": "local", "reasoning": "local", "quick": "gpt-4"},
            "currentModel": "local",
        }

        with pytest.raises(NotFoundError, match="Model profile not found: gpt-4"):
            registry.import_config(incoming)

        assert registry.export_config() == before
        assert registry.get_profile("local") is None
