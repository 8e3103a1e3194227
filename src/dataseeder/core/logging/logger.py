"""
Structured logging configuration for DataSeeder.

This module wires structlog on top of the standard library logging module.
Development runs get Rich console output, production runs get plain stream
output, and an optional file handler is added when LOG_FILE_PATH is set.

Functions:
    setup_logging(): Initialize logging configuration
    get_logger(name): Get configured logger instance
    get_seeder_logger(name): Get a logger bound to one seeder

Configuration:
    Logging behavior is controlled by environment variables:
    - LOG_LEVEL: Minimum log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
    - LOG_FORMAT: Output format (json/text)
    - LOG_FILE_PATH: Optional file output path
    - DEBUG: Enable development mode with rich formatting

Example:
    >>> from dataseeder.core.logging.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Seeding started", seeders=3)
"""

import logging
import logging.config
import sys
from pathlib import Path

import structlog
from rich.console import Console
from rich.logging import RichHandler

from dataseeder.core.config.settings import settings


def setup_logging() -> None:
    """
    Initialize logging configuration.

    Configures the structlog processor chain (level filtering, logger name,
    ISO timestamps, exception formatting and a JSON or console renderer) and
    the standard library handlers it writes through.

    The function selects handlers from the environment:
        - Development/DEBUG: Rich console handler on stderr
        - Otherwise: stream handler on stdout
        - File: additional file handler when LOG_FILE_PATH is configured
    """

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handlers = []

    if settings.DEBUG or settings.ENVIRONMENT == "development":
        console = Console(stderr=True)
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(rich_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(stream_handler)

    if settings.LOG_FILE_PATH:
        file_path = Path(settings.LOG_FILE_PATH)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path)
        file_handler.setLevel(settings.LOG_LEVEL)
        handlers.append(file_handler)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        handlers=handlers,
        format="%(message)s",
    )

    # SQLAlchemy logs every statement at INFO when echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structured logger instance.

    Args:
        name (str): Logger name, typically __name__ of the calling module

    Returns:
        structlog.BoundLogger: Configured logger instance

    Note:
        If logging hasn't been configured yet, this function calls
        setup_logging() first.
    """
    if not structlog.is_configured():
        setup_logging()
    return structlog.get_logger(name)


def get_seeder_logger(seeder_name: str) -> structlog.BoundLogger:
    """
    Create a logger with the seeder name bound to every entry.

    All messages emitted by one seeder carry ``seeder=<name>`` so that
    interleaved output from seeders running concurrently stays attributable.

    Args:
        seeder_name (str): Display name of the seeder

    Returns:
        structlog.BoundLogger: Logger instance with bound seeder name

    Example:
        >>> logger = get_seeder_logger("AuthorSeeder")
        >>> logger.info("Starting to seed authors")
    """
    return get_logger("dataseeder.seeders").bind(seeder=seeder_name)


# Setup logging on import
setup_logging()
