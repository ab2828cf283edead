"""Configuration module: executor settings and state location."""

from typing import Any, Dict, Optional
from pydantic import ValidationError
from ..execution.models import ExecutorSettings
from ..utils.errors import ConfigError
from ..utils.logging import get_logger
from .manager import load_config
from .paths import get_default_config_path, get_user_config_path, get_project_config_path

logger = get_logger("config")


def load_executor_settings(
    config: Optional[Dict[str, Any]] = None,
    **overrides: Any,
) -> ExecutorSettings:
    """
    Build ExecutorSettings from the config tree plus explicit overrides.

    Overrides whose value is None are ignored, so CLI options that were
    not given fall through to the config files.

    Raises:
        ConfigError: If the executor section is not a mapping or holds
            invalid values
    """
    if config is None:
        config = load_config()

    section = config.get("executor", {}) or {}
    if not isinstance(section, dict):
        raise ConfigError("executor config must be a dictionary")

    values = dict(section)
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ExecutorSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid executor settings: {e}")


def get_state_path(config: Optional[Dict[str, Any]] = None) -> str:
    """State file location from config."""
    if config is None:
        config = load_config()
    state = config.get("state", {}) or {}
    if not isinstance(state, dict) or not state.get("path"):
        raise ConfigError("state.path must be set in config")
    return str(state["path"])


__all__ = [
    "load_config",
    "load_executor_settings",
    "get_state_path",
    "get_default_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
