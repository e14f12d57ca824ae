"""
Structured logging setup.

Features:
- structlog loggers everywhere (snake_case event names + key/value context)
- Console: human-readable on stderr (stdout belongs to the stdio MCP transport)
- File: JSON lines with rotation (5MB, 3 backups)
"""

import logging
import logging.handlers
import sys

import structlog

from .config import DevHubConfig

__all__ = ["configure_logging"]

_configured = False


def configure_logging(
    config: DevHubConfig,
    *,
    file_output: bool = True,
    console_level: str | None = None,
) -> None:
    """Configure stdlib logging and structlog once per process.

    Args:
        config: DevHub configuration (log level, log file location)
        file_output: Also write JSON lines to the rotating log file
        console_level: Threshold for stderr output (defaults to the log level)
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, config.log_level.upper(), logging.INFO)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
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

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler(sys.stderr)
    if console_level:
        console.setLevel(getattr(logging, console_level.upper(), level))
    console.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=shared_processors,
    ))
    root.addHandler(console)

    if file_output:
        try:
            config.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                str(config.log_file),
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
            )
            file_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            ))
            root.addHandler(file_handler)
        except OSError:
            pass  # Skip file logging if not writable

    _configured = True
