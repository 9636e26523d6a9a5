"""Environment-driven configuration for the GitHub Operator."""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() in ("1", "true", "yes")


# Forge access
GITHUB_AUTH_TOKEN = os.getenv("GITHUB_AUTH_TOKEN", "")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_WEB_URL = os.getenv("GITHUB_WEB_URL", "https://github.com").rstrip("/")
GITHUB_REQUEST_TIMEOUT_SECONDS = float(os.getenv("GITHUB_REQUEST_TIMEOUT_SECONDS", "30.0"))

# Kubernetes API access from kopf
K8S_REQUEST_TIMEOUT_SECONDS = float(os.getenv("K8S_REQUEST_TIMEOUT_SECONDS", "30.0"))

# Destructive remote deletes are opt-in
ACTUAL_DELETE = _env_bool("ACTUAL_DELETE", False)

# Requeue and resync
REQUEUE_INTERVAL_SECONDS = float(os.getenv("REQUEUE_INTERVAL_SECONDS", "2.0"))
RESYNC_INTERVAL_SECONDS = float(os.getenv("RESYNC_INTERVAL_SECONDS", "1800"))  # Default 30 minutes

# Post-create read-after-write poll for Secrets
SECRET_VISIBILITY_ATTEMPTS = int(os.getenv("SECRET_VISIBILITY_ATTEMPTS", "10"))
SECRET_VISIBILITY_INTERVAL_SECONDS = float(os.getenv("SECRET_VISIBILITY_INTERVAL_SECONDS", "0.01"))

# Retry-on-conflict for status writes
STATUS_UPDATE_ATTEMPTS = int(os.getenv("STATUS_UPDATE_ATTEMPTS", "5"))
STATUS_UPDATE_INTERVAL_SECONDS = float(os.getenv("STATUS_UPDATE_INTERVAL_SECONDS", "0.01"))

# Key generation
KEY_BITS = int(os.getenv("KEY_BITS", "4096"))

# Root log level for the JSON log stream
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Metrics and health server
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))
