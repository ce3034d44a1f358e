"""Error types and log sanitization utilities."""

from __future__ import annotations

import re
from typing import Any

from .retry import format_duration


class OperatorError(Exception):
    """Base class for errors raised by the controller."""


class ValidationError(OperatorError):
    """Malformed input detected before any store access.

    Several problems may be reported at once; they are joined with newlines.
    """

    def __init__(self, messages: str | list[str]):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


class StoreError(OperatorError):
    """Any fault reported by the object store."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class NotFoundError(StoreError):
    """The requested object does not exist."""

    def __init__(self, resource: str, name: str, message: str | None = None):
        self.resource = resource
        self.name = name
        super().__init__(message or f'{resource} "{name}" not found', status=404)


class ConflictError(StoreError):
    """Optimistic-concurrency violation on update."""

    def __init__(self, message: str):
        super().__init__(message, status=409)


class ConditionFailedError(OperatorError):
    """The milestone's condition was reported with status False."""

    def __init__(self, kind: str, name: str, milestone: str, reason: str, message: str):
        self.kind = kind
        self.name = name
        self.milestone = milestone
        self.reason = reason
        self.message = message
        super().__init__(f'{kind} "{name}" failed to become {milestone}: {reason}: {message}')


class WaitTimeoutError(OperatorError):
    """The deadline passed before the milestone succeeded or failed."""

    def __init__(
        self,
        kind: str,
        name: str,
        milestone: str,
        elapsed: float,
        last_state: str,
        not_found: bool = False,
        cancelled: bool = False,
    ):
        self.kind = kind
        self.name = name
        self.milestone = milestone
        self.elapsed = elapsed
        self.last_state = last_state
        self.not_found = not_found
        self.cancelled = cancelled
        verb = "cancelled" if cancelled else "timed out"
        super().__init__(
            f'{verb} after {format_duration(round(elapsed, 3))} waiting for {kind} "{name}" '
            f"to be {milestone}: {last_state}"
        )


class GrantConfigurationError(OperatorError):
    """Resources backing the grant server could not be created."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"-----BEGIN [A-Z ]+-----[\s\S]*?-----END [A-Z ]+-----",
    r"(bearer\s+)[A-Za-z0-9\-\._~\+/]+=*",
    r"(code=)[A-Za-z0-9\-_]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "tls.key",
    "ca.key",
    "password",
    "secret",
    "token",
    "code",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with key material and tokens redacted
    """
    sanitized = re.sub(SENSITIVE_PATTERNS[0], "[REDACTED PEM]", message)
    for pattern in SENSITIVE_PATTERNS[1:]:
        sanitized = re.sub(pattern, r"\1[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in ("password", "token", "tls.key", "ca.key"):
        sanitized = re.sub(
            rf"({re.escape(field)}[:=]\s*)([^\s,;\)]+)",
            r"\1[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Secret names (e.g. ``tlsCredentials``) are references, not material, and
    are left alone; only keys whose name contains a sensitive field are
    redacted.
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
