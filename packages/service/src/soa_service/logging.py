"""structlog setup for processes that host the service.

Library code only calls ``structlog.get_logger()``; the host decides the
level and rendering once at start-up.
"""

import logging

import structlog

from soa_core.exceptions import ConfigurationError


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog for the given level.

    Args:
        level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render events as JSON lines instead of the console format
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(
            f"Invalid log level: {level}",
            config_key="log_level",
            expected="DEBUG, INFO, WARNING, ERROR or CRITICAL",
            actual=level,
        )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
