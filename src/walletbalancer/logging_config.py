"""Structured logging configuration with separate action log."""

import logging
import logging.handlers
from pathlib import Path

import structlog

from walletbalancer.config import LoggingConfig

ACTION_LOGGER_NAME = "walletbalancer.actions"


def configure_logging(config: LoggingConfig) -> None:
    """Set up structured logging with console + file outputs."""
    for log_path in [config.app_log, config.action_log]:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)

    # Applied to walletbalancer events and to stdlib records from libraries,
    # so both file logs carry the same keys.
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=shared_processors,
    )

    console_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=True),
        foreign_pre_chain=shared_processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))

    # stdout is reserved for the snapshot output of the CLI
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    app_handler = logging.handlers.RotatingFileHandler(
        config.app_log,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
    )
    app_handler.setFormatter(json_formatter)
    root_logger.addHandler(app_handler)

    # Transfer actions created or extended by a pass also land in their own
    # file, one JSON line each, for audit of queued work.
    action_logger = logging.getLogger(ACTION_LOGGER_NAME)
    action_handler = logging.handlers.RotatingFileHandler(
        config.action_log,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
    )
    action_handler.setFormatter(json_formatter)
    action_logger.addHandler(action_handler)
    action_logger.propagate = True


def get_action_logger() -> structlog.stdlib.BoundLogger:
    """Get the logger that records every created or updated action."""
    return structlog.get_logger(ACTION_LOGGER_NAME)
