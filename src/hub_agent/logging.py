"""Structured logging configuration for the Hub agent."""

import json
import logging
import os
import sys
from typing import Any

from .utils.context import get_context_dict
from .utils.errors import sanitize_dict


def setup_structured_logging() -> None:
    """Configure structured JSON logging."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    if not logger.isEnabledFor(level):
        return

    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(get_context_dict(sanitize_dict(kwargs)))
    logger.log(level, json.dumps(log_data, default=str))

