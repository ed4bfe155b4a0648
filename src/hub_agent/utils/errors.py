"""Error types and sanitization utilities to prevent information leakage."""

from __future__ import annotations

import re
from typing import Any

from kubernetes.client.exceptions import ApiException


class HubAgentError(Exception):
    """Base class for errors raised by the agent."""


class ConfigError(HubAgentError):
    """Raised when the agent configuration is invalid."""


class DeadlineExceeded(HubAgentError):
    """Raised when a reconciliation pass ran out of time."""


class ResolutionError(HubAgentError):
    """Raised when a gateway's APIs cannot be resolved."""


class SelectorError(ResolutionError):
    """Raised when a label selector cannot be converted."""


class CertificatePropagationError(HubAgentError):
    """Raised when certificates could not be propagated to every gateway or portal."""

    def __init__(self, names: list[str], kind: str = "gateways") -> None:
        self.names = names
        self.kind = kind
        super().__init__(f"unable to propagate certificates for {kind}: {', '.join(names)}")


class PlatformAPIError(HubAgentError):
    """Error returned by the Hub platform."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"failed with code {status_code}: {message}")


def is_not_found(error: BaseException) -> bool:
    """Check whether an error is a Kubernetes 404."""
    return isinstance(error, ApiException) and error.status == 404


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(-----BEGIN [A-Z ]+-----)[A-Za-z0-9+/=\s]+(-----END [A-Z ]+-----)",
    r"(Bearer )[A-Za-z0-9\-\._~\+/]+=*",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "token",
    "password",
    "private_key",
    "privatekey",
    "tls.key",
    "authorization",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = re.sub(SENSITIVE_PATTERNS[0], r"\1[REDACTED]\2", message)
    sanitized = re.sub(SENSITIVE_PATTERNS[1], r"\1[REDACTED]", sanitized)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{re.escape(field)}[\"']?[:=\s]+[\"']?([^\s,;\)\"']+)",
            f"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    if isinstance(error, ApiException):
        # The response body echoes the request, certificates included
        return sanitize_error_message(f"({error.status}) Reason: {error.reason}")
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
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
