"""Logging helpers with secret redaction."""

from __future__ import annotations

import logging
import re
from typing import Iterable

_SECRET_PATTERNS = (
    (re.compile(r"Bearer\s+[A-Za-z0-9\-_.]+"), "Bearer [REDACTED]"),
    (re.compile(r"sk-[A-Za-z0-9\-_]{8,}"), "sk-[REDACTED]"),
)

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def redact(text: str, extra_secrets: Iterable[str | None] = ()) -> str:
    """Mask API keys and bearer tokens before text reaches a log line.

    Literal values in ``extra_secrets``, such as the configured API key, are
    masked as well; empty values are ignored.
    """
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    for secret in filter(None, extra_secrets):
        text = text.replace(secret, "[REDACTED]")
    return text


def preview(text: str, limit: int = 120) -> str:
    """Single-line, redacted preview of free-form text for log lines."""
    flattened = " ".join(text.split())
    if len(flattened) > limit:
        flattened = flattened[: limit - 3] + "..."
    return redact(flattened)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger
