"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_FORGE_RATE_LIMIT_PER_SECOND = float(os.getenv("GITHUB_RATE_LIMIT_PER_SECOND", "5.0"))

# Track last call times
_k8s_last_call_time: float = 0.0
_forge_last_call_time: float = 0.0


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Enforces a minimum interval between calls so the API server is not
    overwhelmed by tight requeue loops.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND

        time_since_last_call = time.time() - _k8s_last_call_time
        if time_since_last_call < min_interval:
            time.sleep(min_interval - time_since_last_call)

        _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_forge(func: _F) -> _F:
    """Decorator to rate limit forge API calls."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _forge_last_call_time
        min_interval = 1.0 / _FORGE_RATE_LIMIT_PER_SECOND

        time_since_last_call = time.time() - _forge_last_call_time
        if time_since_last_call < min_interval:
            time.sleep(min_interval - time_since_last_call)

        _forge_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def is_rate_limit_response(status_code: int | None, body: str = "", remaining: str | None = None) -> bool:
    """Check whether an HTTP response signals a rate limit.

    GitHub answers primary limits with 403 and ``X-RateLimit-Remaining: 0``,
    secondary limits with 403 or 429 and a "rate limit" message.
    """
    if status_code == 429:
        return True
    if status_code == 403:
        return remaining == "0" or "rate limit" in body.lower()
    return False


def handle_rate_limit_error(e: Exception, api_type: str = "k8s", max_retries: int = 3) -> bool:
    """Check if an API exception is a rate limit error and back off.

    Args:
        e: Exception raised by the API call (must expose ``status``/``status_code``)
        api_type: Label for the rate limit metric
        max_retries: Maximum number of retries

    Returns:
        True if rate limit error was handled and the call may be retried
    """
    status = getattr(e, "status", None) or getattr(e, "status_code", None)
    rate_limited = status == 429 or (status in (403, 503) and "rate limit" in str(e).lower())

    if rate_limited:
        metrics.rate_limit_hits_total.labels(api_type=api_type).inc()
        # Exponential backoff: 1s, 2s, 4s
        retry_count = getattr(handle_rate_limit_error, "_retry_count", 0)
        if retry_count < max_retries:
            time.sleep(2 ** retry_count)
            handle_rate_limit_error._retry_count = retry_count + 1  # type: ignore
            return True
        handle_rate_limit_error._retry_count = 0  # type: ignore
        return False

    handle_rate_limit_error._retry_count = 0  # type: ignore
    return False
