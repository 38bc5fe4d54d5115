"""
Shared pytest fixtures for all tests.
"""
import asyncio
import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from config import Config
from core import (
    AdapterContext,
    InternalToolCall,
    InvokeOptions,
    ModelProfile,
    ModelRegistry,
    SessionStore,
    ToolConverter,
    ToolDispatcher,
    ToolResult,
)


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingExecutor:
    """Tool executor that records calls and returns scripted results."""

    def __init__(self, delay: float = 0.0, error: Exception | None = None):
        self.delay = delay
        self.error = error
        self.calls: list[InternalToolCall] = []

    async def execute(self, call: InternalToolCall) -> ToolResult:
        self.calls.append(call)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ToolResult(tool_use_id=call.id, content=f"ran {call.name}")


class ScriptedInvoker:
    """Model invoker with per-model delays and failures."""

    def __init__(self, delays: dict[str, float] | None = None, failures: set[str] | None = None):
        self.delays = delays or {}
        self.failures = failures or set()
        self.calls: list[tuple[str, str]] = []

    async def invoke(self, profile: ModelProfile, prompt: str, options: InvokeOptions | None = None) -> str:
        self.calls.append((profile.name, prompt))
        await asyncio.sleep(self.delays.get(profile.name, 0))
        if profile.name in self.failures:
            raise RuntimeError(f"{profile.name} is unavailable")
        return f"{profile.name} says: {prompt}"


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def invoker() -> ScriptedInvoker:
    return ScriptedInvoker()


@pytest.fixture
def store(clock: FakeClock, temp_dir: Path) -> SessionStore:
    """Session store with a small cap, a fake clock and a 60s idle timeout."""
    return SessionStore(
        max_sessions=3,
        session_timeout=60,
        cleanup_interval=3600,
        default_working_directory=str(temp_dir),
        clock=clock,
    )


@pytest.fixture
def registry(invoker: ScriptedInvoker) -> ModelRegistry:
    return ModelRegistry(invoker)


@pytest.fixture
def context(store: SessionStore, executor: RecordingExecutor, registry: ModelRegistry) -> AdapterContext:
    """Adapter context wired to fake collaborators."""
    return AdapterContext(
        sessions=store,
        converter=ToolConverter(),
        dispatcher=ToolDispatcher(executor, timeout=5),
        models=registry,
    )


@pytest.fixture
def config(temp_dir: Path) -> Config:
    return Config(working_directory=str(temp_dir))


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Isolate tests from the host's ACP_* variables."""
    for name in ("ACP_WORKING_DIRECTORY", "ACP_PERMISSION_MODE", "ACP_LOG_LEVEL", "ACP_PORT", "ACP_HOST"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def make_executor():
    """Factory for recording executors with custom delay or failure."""
    return RecordingExecutor


@pytest.fixture
def make_invoker():
    """Factory for scripted invokers with custom delays or failures."""
    return ScriptedInvoker
