"""CLI utilities package."""

from typing import Any, Dict, Optional
import click
from ...config import load_config, get_state_path
from ...utils.errors import ConfigError
from ...utils.logging import setup_logging, get_logger
from .file_resolver import resolve_file_path

logger = get_logger("cli.utils")


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.

    Args:
        message: Error message
        suggestion: Optional suggestion or help text

    Returns:
        Formatted error string
    """
    error = f"Error: {message}"
    if suggestion:
        error += f"\nTip: {suggestion}"
    return error


def load_cli_config(config_path: Optional[str], verbose: bool = False) -> Dict[str, Any]:
    """Load layered config and set the log level it asks for."""
    config = load_config(config_path)
    level = "DEBUG" if verbose else (config.get("logging") or {}).get("level", "WARNING")
    try:
        setup_logging(level=level)
    except ValueError as e:
        raise ConfigError(f"Invalid logging.level in config: {e}")
    return config


def resolve_state_path(state: Optional[str], config: Dict[str, Any]) -> str:
    """CLI --state wins over the configured state path."""
    return state if state else get_state_path(config)


def echo_safe(text: str, err: bool = False) -> None:
    """Echo text, degrading to ASCII on terminals that cannot encode it."""
    try:
        click.echo(text, err=err)
    except UnicodeEncodeError:
        click.echo(text.encode('ascii', errors='replace').decode('ascii'), err=err)


__all__ = ["resolve_file_path", "format_error", "load_cli_config", "resolve_state_path", "echo_safe"]
