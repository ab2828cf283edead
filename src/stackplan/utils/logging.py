"""Logging setup for StackPlan: stderr handler, `stackplan.<area>` loggers."""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: Union[int, str]) -> int:
    """Accept a numeric level or a name such as 'warning'."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(level: Union[int, str] = logging.INFO, format_string: Optional[str] = None) -> logging.Logger:
    """
    Configure stderr logging once and set the StackPlan log level.

    Args:
        level: Numeric level or level name (default: INFO)
        format_string: Custom format string (optional)

    Returns:
        The package logger
    """
    numeric_level = parse_level(level)
    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stderr,
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # basicConfig is a no-op after the first call; the package level still applies
    logger = logging.getLogger("stackplan")
    logger.setLevel(numeric_level)
    return logger


def get_logger(area: str) -> logging.Logger:
    """Logger for one area of the package, e.g. get_logger("planning.planner")."""
    return logging.getLogger(f"stackplan.{area}")
