"""
Structured logging helpers for ingestion workflows.

Resource URIs handed out by the backend carry shared access signatures
in their query string; those never reach the log.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlsplit, urlunsplit


def redact_uri(uri: str) -> str:
    """
    Drop the query string (the access signature) from a resource URI.
    """

    parts = urlsplit(uri)
    if not parts.scheme or not parts.query:
        return uri
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _scrub(value: Any) -> Any:
    if isinstance(value, str) and "://" in value:
        return redact_uri(value)
    return value


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON, with URI fields redacted.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **{name: _scrub(value) for name, value in fields.items()}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
