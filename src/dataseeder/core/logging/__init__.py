"""
DataSeeder Logging Module - Structured Application Logging.

Thin package around ``logger.py``: structlog processors rendering to Rich in
development and to JSON lines elsewhere, with an optional log file.

Example:
    >>> from dataseeder.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Seeder finished", seeder="AuthorSeeder", duration=0.12)
"""

from .logger import get_logger, get_seeder_logger, setup_logging

__all__ = ["get_logger", "get_seeder_logger", "setup_logging"]
