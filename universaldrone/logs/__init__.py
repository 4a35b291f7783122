"""
Logging Module.

This module provides logging utilities and handlers.
"""

from universaldrone.logs.handlers import (
    ErrprinterHandler,
    get_adapter_logger,
    get_universaldrone_logger,
    setup_universaldrone_logging,
)

__all__ = [
    "ErrprinterHandler",
    "get_adapter_logger",
    "get_universaldrone_logger",
    "setup_universaldrone_logging",
]
