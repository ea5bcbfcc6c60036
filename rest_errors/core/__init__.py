"""
Core infrastructure components for the application.

This module contains logging configuration and the REST exception
handling package.
"""

from .logging_config import setup_logging

__all__ = [
    "setup_logging",
]
