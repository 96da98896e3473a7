"""Observability module for geoffload.

Provides structured logging via structlog with rich console output.
"""

from geoffload.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
