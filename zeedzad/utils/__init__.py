"""Utility modules for the Zeedzad application."""

from zeedzad.utils.logging import LogContext, get_logger, setup_logging
from zeedzad.utils.secrets import mask_secret

__all__ = [
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
    # Secrets
    "mask_secret",
]
