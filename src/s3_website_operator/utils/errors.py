"""Redaction of credentials from error messages, logs and events.

S3 errors may echo request details back, including presigned query
parameters and the authorization header; none of that may reach a
Kubernetes event or a log line.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

# Each pattern captures the secret part in group 1
_SENSITIVE_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\b((?:AKIA|ASIA)[A-Z0-9]{16})\b",
        r"access[_\s]?key[_\s]?id[:=\s]+([A-Z0-9]{16,128})",
        r"secret[_\s]?access[_\s]?key[:=\s]+([A-Za-z0-9/+=]{40})",
        r"session[_\s]?token[:=\s]+([A-Za-z0-9/+=]+)",
        r"x-amz-security-token[:=\s]+([A-Za-z0-9/+=%]+)",
        r"X-Amz-Credential=([^&\s]+)",
        r"X-Amz-Signature=([a-f0-9]{64})",
        r"Signature=([a-f0-9]{64})",
        r"Authorization:\s*(AWS4-HMAC-SHA256\s+[^\r\n]+)",
    )
]

# Keys whose values are always secret, matched as substrings
SENSITIVE_FIELDS = frozenset({
    "access_key",
    "secret_key",
    "session_token",
    "password",
    "secret",
    "credentials",
    "token",
    "authorization",
})

_FIELD_VALUE = re.compile(
    r"\b(" + "|".join(sorted(SENSITIVE_FIELDS, key=len, reverse=True)) + r")[:=\s]+([^\s,;\)]+)",
    re.IGNORECASE,
)


def sanitize_error_message(message: str) -> str:
    """Redact credentials and signatures from a message."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(lambda m: m.group(0).replace(m.group(1), REDACTED), sanitized)
    return _FIELD_VALUE.sub(lambda m: f"{m.group(1)}: {REDACTED}", sanitized)


def sanitize_exception(error: Exception) -> str:
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Return a copy of data with sensitive values redacted.

    Args:
        data: Dictionary to sanitize, nested dictionaries included
        sensitive_keys: Additional key substrings to redact

    Returns:
        Sanitized copy; strings are scrubbed with sanitize_error_message
    """
    sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if any(field in str(key).lower() for field in sensitive):
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value
    return sanitized
