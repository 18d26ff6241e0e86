"""Structured event logging.

Every event is one JSON object on the ``ringi`` logger, so any log shipper
that understands JSON lines can index it without extra parsing rules.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("ringi")


def configure_logging(level: str = "INFO") -> None:
    """Attach a plain message handler to the ``ringi`` logger once."""
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def log_event(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    payload: dict[str, Any] = {"event": event, **fields}
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
