"""Default configuration values."""

from core.model_registry import DEFAULT_MODEL_POINTERS, DEFAULT_MODEL_PROFILES
from core.permissions import DEFAULT_DECISION_RETENTION_SECONDS
from core.sessions import (
    DEFAULT_CLEANUP_INTERVAL_SECONDS,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_SESSION_TIMEOUT_SECONDS,
)
from core.tools import DEFAULT_TOOL_TIMEOUT_SECONDS

VERSION = "0.1.0"

DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Tool execution
DEFAULT_SHELL_TIMEOUT_SECONDS = 30
DEFAULT_WEB_FETCH_TIMEOUT_SECONDS = 30
MAX_TOOL_OUTPUT_CHARS = 100_000

# Server
DEFAULT_HOST = "127.0.0.1"

# Model invocation
DEFAULT_INVOKER = "simulated"
SIMULATED_INVOKER_DELAY_SECONDS = 0.1

# Provider name -> pydantic_ai model prefix and API key variable
DEFAULT_MODEL_PROVIDERS = {
    "anthropic": {
        "name": "Anthropic",
        "prefix": "anthropic",
        "env_key": "ANTHROPIC_API_KEY",
    },
    "openai": {
        "name": "OpenAI",
        "prefix": "openai",
        "env_key": "OPENAI_API_KEY",
    },
    "google": {
        "name": "Google Gemini",
        "prefix": "google-gla",
        "env_key": "GEMINI_API_KEY",
    },
    "groq": {
        "name": "Groq",
        "prefix": "groq",
        "env_key": "GROQ_API_KEY",
    },
    "mistral": {
        "name": "Mistral",
        "prefix": "mistral",
        "env_key": "MISTRAL_API_KEY",
    },
    "ollama": {
        "name": "Ollama (Local)",
        "prefix": "ollama",
        "env_key": None,  # No API key needed
    },
}

# Config files
CONFIG_DIR_NAME = ".acp-adapter"
GLOBAL_CONFIG_FILENAME = "config.jsonc"
PROJECT_CONFIG_FILES = (
    "acp-adapter.jsonc",
    "acp-adapter.json",
    ".acp-adapter/config.jsonc",
)

# Environment overrides: variable -> dotted config path
ENV_OVERRIDES = {
    "ACP_WORKING_DIRECTORY": "working_directory",
    "ACP_PERMISSION_MODE": "permission_mode",
    "ACP_LOG_LEVEL": "log_level",
    "ACP_PORT": "server.port",
    "ACP_HOST": "server.host",
}

__all__ = [
    "VERSION",
    "DEFAULT_LOG_LEVEL",
    "LOG_LEVELS",
    "DEFAULT_MAX_SESSIONS",
    "DEFAULT_SESSION_TIMEOUT_SECONDS",
    "DEFAULT_CLEANUP_INTERVAL_SECONDS",
    "DEFAULT_TOOL_TIMEOUT_SECONDS",
    "DEFAULT_DECISION_RETENTION_SECONDS",
    "DEFAULT_SHELL_TIMEOUT_SECONDS",
    "DEFAULT_WEB_FETCH_TIMEOUT_SECONDS",
    "MAX_TOOL_OUTPUT_CHARS",
    "DEFAULT_HOST",
    "DEFAULT_INVOKER",
    "SIMULATED_INVOKER_DELAY_SECONDS",
    "DEFAULT_MODEL_PROFILES",
    "DEFAULT_MODEL_POINTERS",
    "DEFAULT_MODEL_PROVIDERS",
    "CONFIG_DIR_NAME",
    "GLOBAL_CONFIG_FILENAME",
    "PROJECT_CONFIG_FILES",
    "ENV_OVERRIDES",
]
