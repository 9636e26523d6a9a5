"""Structured logging configuration for the GitHub Operator."""

import json
import logging
import sys
from typing import Any

from .utils.errors import sanitize_error_message

REDACTED = "***REDACTED***"

# Extra fields that never reach the log stream
SECRET_FIELDS = {"token", "private_key", "identity", "password", "authorization"}


class JsonFormatter(logging.Formatter):
    """Render every record as one JSON object per line.

    Records produced by ``log_resource_event`` already carry a JSON payload
    and are passed through; anything else (kopf, kubernetes, urllib3) is
    wrapped so the stream stays machine readable.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if message.startswith("{"):
            return message

        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_error_message(message),
        }
        if record.exc_info:
            payload["exception"] = sanitize_error_message(self.formatException(record.exc_info))
        return json.dumps(payload, default=str)


def setup_structured_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger.

    Args:
        level: Root log level name
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured event about one custom resource.

    Extra keyword arguments become additional JSON fields (for example
    ``organization``, ``repository`` or ``key_id``).
    """
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": sanitize_error_message(message),
    }
    log_data.update(sanitize_secrets(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Redact secret fields and scrub credentials out of string values."""
    sanitized = {}
    for field, value in log_data.items():
        if field in SECRET_FIELDS:
            sanitized[field] = REDACTED
        elif isinstance(value, dict):
            sanitized[field] = sanitize_secrets(value)
        elif isinstance(value, str):
            sanitized[field] = sanitize_error_message(value)
        else:
            sanitized[field] = value
    return sanitized
