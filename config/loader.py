"""Configuration loading utilities."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

from .defaults import CONFIG_DIR_NAME, ENV_OVERRIDES, GLOBAL_CONFIG_FILENAME, PROJECT_CONFIG_FILES
from .main_config import Config

logger = logging.getLogger(__name__)

# A JSON string literal, a // comment or a /* */ comment
_JSONC_TOKEN = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_jsonc_comments(content: str) -> str:
    """
    Strip comments from JSONC content to convert to valid JSON.

    Handles:
    - Single-line comments: // comment
    - Multi-line comments: /* comment */

    Comment markers inside string literals (e.g. URLs) are left alone.

    Args:
        content: JSONC content string

    Returns:
        JSON string with comments removed
    """
    return _JSONC_TOKEN.sub(lambda m: m.group(1) or "", content)


def load_config_file(path: Path) -> dict[str, Any] | None:
    """
    Load a config file from the given path.

    Supports both .json and .jsonc files with comment stripping.

    Args:
        path: Path to the config file

    Returns:
        Parsed config dictionary, or None if the file doesn't exist or
        cannot be parsed
    """
    if not path.exists():
        return None

    try:
        content = path.read_text()
        if path.suffix == ".jsonc":
            content = strip_jsonc_comments(content)
        data = json.loads(content)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level must be an object", path)
        return None

    logger.debug("Loaded config from %s", path)
    return data


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two configuration dictionaries.

    Args:
        base: Base configuration
        override: Override configuration (takes precedence)

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """
    Apply ``ACP_*`` environment variables on top of file configuration.

    Args:
        data: Merged file configuration
        environ: Environment to read (defaults to os.environ)

    Returns:
        A new configuration dictionary
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    for variable, dotted in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        target = overrides
        *parents, leaf = dotted.split(".")
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value
        logger.debug("Config override from %s", variable)

    return merge_configs(data, overrides)


def global_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / GLOBAL_CONFIG_FILENAME


def load_config(
    project_root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Load configuration from multiple sources with precedence.

    Sources, lowest precedence first:
    1. Global: ~/.acp-adapter/config.jsonc
    2. Project: the first of acp-adapter.jsonc, acp-adapter.json,
       .acp-adapter/config.jsonc (or ``config_path`` when given)
    3. ACP_* environment variables

    Args:
        project_root: Project root directory (defaults to current working directory)
        config_path: Explicit config file used instead of the project search
        environ: Environment to read overrides from (defaults to os.environ)

    Returns:
        Loaded and merged Config model

    Raises:
        FileNotFoundError: If ``config_path`` does not exist
        pydantic.ValidationError: If a value is invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_data = load_config_file(global_config_path()) or {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config_data = merge_configs(config_data, load_config_file(config_path) or {})
    else:
        for name in PROJECT_CONFIG_FILES:
            project_config = load_config_file(project_root / name)
            if project_config:
                config_data = merge_configs(config_data, project_config)
                break

    config_data = apply_env_overrides(config_data, environ)
    return Config(**config_data)
