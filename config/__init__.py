"""
Configuration module for the adapter.

Exports the configuration models and loader functions used by the entry point.
"""

from .defaults import VERSION
from .loader import (
    apply_env_overrides,
    global_config_path,
    load_config,
    load_config_file,
    merge_configs,
    strip_jsonc_comments,
)
from .main_config import Config
from .models_config import ModelsConfig
from .server_config import ServerConfig
from .sessions_config import SessionsConfig
from .tools_config import ToolsConfig

__all__ = [
    # Constants
    "VERSION",
    # Config models
    "Config",
    "SessionsConfig",
    "ToolsConfig",
    "ModelsConfig",
    "ServerConfig",
    # Loader functions
    "load_config",
    "load_config_file",
    "merge_configs",
    "apply_env_overrides",
    "global_config_path",
    "strip_jsonc_comments",
]
