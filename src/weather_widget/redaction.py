"""Helpers for masking host-identifying values in logs.

The geolocation provider echoes the caller's public IP address and ISP
details back in its payload, so anything that might end up in a log line
goes through these helpers first.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_KEY_RE = re.compile(
    r"^(query|ip|as|isp|org|zip|user[_-]?agent)$",
    re.IGNORECASE,
)
_IPV4_RE = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
_IPV6_RE = re.compile(
    r"""(?ix)
    (?<![0-9a-f:])
    [0-9a-f]{1,4}(?::[0-9a-f]{0,4}){3,7}
    (?![0-9a-f:])
    """
)


def sanitize_text(text: str) -> str:
    """Redact IP address literals embedded in plain text."""
    sanitized = _IPV4_RE.sub(REDACTED, text)
    sanitized = _IPV6_RE.sub(REDACTED, sanitized)
    return sanitized


def sanitize_for_logging(value: Any) -> Any:
    """Recursively redact host-identifying values in nested structures."""
    if isinstance(value, dict):
        sanitized: dict[Any, Any] = {}
        for key, child in value.items():
            if _SENSITIVE_KEY_RE.search(str(key)):
                sanitized[key] = REDACTED
            else:
                sanitized[key] = sanitize_for_logging(child)
        return sanitized
    if isinstance(value, list):
        return [sanitize_for_logging(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_for_logging(item) for item in value)
    if isinstance(value, str):
        return sanitize_text(value)
    return value
