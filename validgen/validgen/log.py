"""Diagnostics logger passed explicitly into each pipeline step.

Components never reach for a module-level logger: they accept a ``log``
argument and fall back to a no-op logger when none is given.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "validgen"

_null = logging.getLogger(f"{ROOT_LOGGER}.null")
_null.addHandler(logging.NullHandler())
_null.propagate = False


class BoundLogger(logging.LoggerAdapter):
    """Logger adapter carrying key/value context.

    Context is rendered after the message as ``key=value`` pairs, e.g.
    ``parsing validations tag='`validate:"required"`'``.
    """

    def __init__(self, logger: logging.Logger, fields: dict[str, Any] | None = None):
        super().__init__(logger, dict(fields or {}))

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        if not self.extra:
            return msg, kwargs
        ctx = " ".join(f"{k}={v!r}" for k, v in self.extra.items())
        return f"{msg} {ctx}", kwargs

    def bind(self, **fields: Any) -> BoundLogger:
        """Return a child logger with ``fields`` merged into the context."""
        return BoundLogger(self.logger, {**self.extra, **fields})


def get_logger(log: BoundLogger | logging.Logger | None = None) -> BoundLogger:
    """Resolve an optional logger argument; ``None`` means no-op."""
    if log is None:
        return BoundLogger(_null)
    if isinstance(log, BoundLogger):
        return log
    return BoundLogger(log)


def setup_logging(debug: bool = False, console: Console | None = None) -> BoundLogger:
    """Configure the ``validgen`` logger to print through rich on stderr."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_level=debug,
        show_path=debug,
        markup=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return BoundLogger(logger)
