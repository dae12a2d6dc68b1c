"""Structured logging helpers for the scanner."""

import logging
from typing import Optional, Union

from .context import log_context


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges its static fields with per-call ``extra``."""

    def process(self, msg, kwargs):
        # Per-call extra wins over the adapter's defaults
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger that tags every record with ``component``.

    Args:
        name: Logger name (typically __name__)
        component: Component label injected into all records, e.g. "feed"

    Returns:
        Plain logger when no component is given, otherwise an adapter

    Example:
        >>> logger = get_logger(__name__, component="pipeline")
        >>> logger.info("Run started", extra={"event": "pipeline.run.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = ["ComponentLoggerAdapter", "get_logger", "log_context"]
