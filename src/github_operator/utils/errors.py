"""Operator exceptions and error sanitization to prevent information leakage."""

import re


class NotFoundError(Exception):
    """Raised when a Kubernetes object does not exist."""


class ConflictError(Exception):
    """Raised when a write is rejected because the object changed since it was read."""


class ForgeError(Exception):
    """Raised when the forge API returns an unexpected response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SecretMismatchError(Exception):
    """Raised when a Secret's public key does not match the Key status.

    This is not automatically reconcilable; the conflicting Secret has to be
    removed or the Key re-created under a non-colliding name.
    """


class SecretNotVisibleError(Exception):
    """Raised when a freshly created Secret cannot be read back in time."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(gh[pousr]_)[A-Za-z0-9]{20,}",
    r"(github_pat_)[A-Za-z0-9_]{20,}",
    r"(authorization:\s*(?:token|bearer))\s+\S+",
]

PRIVATE_KEY_PATTERN = re.compile(
    r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----",
    flags=re.DOTALL,
)

# Fields to redact completely
SENSITIVE_FIELDS = {
    "token",
    "password",
    "private_key",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = PRIVATE_KEY_PATTERN.sub("[REDACTED PRIVATE KEY]", message)

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        # Replace field: value patterns
        sanitized = re.sub(
            rf"\b{field}[:=\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))

