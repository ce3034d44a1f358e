"""Structured logging configuration for the site link controller."""

import json
import logging
import sys
from typing import Any

from .constants import CONTROLLER_NAME
from .utils.errors import sanitize_dict


def setup_structured_logging(level: str = "info") -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    controller: str = CONTROLLER_NAME,
    **kwargs: Any,
) -> None:
    """Log a structured resource event as one JSON line."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(sanitize_dict(kwargs))
    logger.log(level, json.dumps(log_data, default=str))
