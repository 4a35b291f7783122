"""
Logging Handlers.

Sessions log on ``universaldrone.*`` (one logger per module). Whatever the
hardware side reports, native exceptions, autopilot status text and link
losses, goes to the ``adapter`` logger, or to ``adapter.<name>`` for a
specific backend, so it can be shown or silenced on its own.
"""

from __future__ import annotations

import logging
import sys

ADAPTER_LOGGER_NAME = "adapter"


class ErrprinterHandler(logging.Handler):
    """
    Print adapter messages to stderr, tagged with the logger they came from.

    Installed on the ``adapter`` logger by :py:func:`setup_universaldrone_logging`.
    """

    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(logging.Formatter("%(levelname)s: %(message)s (%(name)s)"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def setup_universaldrone_logging(
    level: int = logging.INFO,
    adapter_level: int = logging.WARNING,
) -> None:
    """
    Configure session and adapter log levels and print adapter messages.

    Safe to call repeatedly: only the levels change after the first call.

    Args:
        level: Level of the ``universaldrone`` logger
        adapter_level: Level of the ``adapter`` logger
    """
    get_universaldrone_logger().setLevel(level)

    adapter_logger = get_adapter_logger()
    adapter_logger.setLevel(adapter_level)
    if not any(isinstance(h, ErrprinterHandler) for h in adapter_logger.handlers):
        adapter_logger.addHandler(ErrprinterHandler())


def get_universaldrone_logger() -> logging.Logger:
    return logging.getLogger("universaldrone")


def get_adapter_logger(name: str | None = None) -> logging.Logger:
    """
    Logger for hardware-side messages.

    Args:
        name: Adapter name; "sim" gives the ``adapter.sim`` child logger
    """
    if name:
        return logging.getLogger(f"{ADAPTER_LOGGER_NAME}.{name}")
    return logging.getLogger(ADAPTER_LOGGER_NAME)
