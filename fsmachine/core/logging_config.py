"""
Logging setup for applications embedding fsmachine.

Every module logs through structlog with snake_case event names and
key=value context (machine, state, trigger). Nothing is configured on import;
an application calls configure_logging() once at startup to route the
``fsmachine`` logger tree through a structlog ProcessorFormatter.
"""

import logging
import sys
from typing import IO, List, Optional

import structlog

from fsmachine.core.config import Settings, settings

LIBRARY_LOGGER = "fsmachine"

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENVIRONMENT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def _shared_processors() -> List[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def get_log_level(config: Optional[Settings] = None) -> str:
    """
    Resolve the level for the fsmachine loggers.

    An explicit FSM_LOG_LEVEL wins; otherwise the level follows
    FSM_ENVIRONMENT (production/staging INFO, development DEBUG,
    test WARNING, anything else INFO).
    """
    config = config or settings
    if config.log_level in _VALID_LEVELS:
        return config.log_level
    return _ENVIRONMENT_LEVELS.get(config.environment, "INFO")


def configure_logging(config: Optional[Settings] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Route fsmachine logs through structlog.

    JSON lines in production, plain console output elsewhere. Only the
    ``fsmachine`` logger tree gets a handler; the host's root logger is
    left alone. structlog's global configuration is set only when the host
    has not configured structlog itself; an existing setup is kept and must
    end in ``ProcessorFormatter.wrap_for_formatter`` for fsmachine events to
    reach this handler.

    Args:
        config: Settings to read environment and level from
        stream: Output stream, stderr by default

    Returns:
        The configured ``fsmachine`` stdlib logger
    """
    config = config or settings
    shared = _shared_processors()

    if not structlog.is_configured():
        structlog.configure(
            processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    if config.environment == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=shared,
        )
    )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers = [handler]
    library_logger.setLevel(get_log_level(config))
    library_logger.propagate = False
    return library_logger
