"""Read-modify-write helpers with bounded retry on version conflicts."""

from __future__ import annotations

import copy
import logging
import time
from typing import Any, Callable, TypeVar

from .. import config, metrics
from .errors import ConflictError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def retry_on_conflict(
    kind: str,
    fn: Callable[[], _T],
    attempts: int | None = None,
    interval: float | None = None,
) -> _T:
    """Run ``fn`` until it stops raising ``ConflictError``.

    ``fn`` must re-read the object it writes on every call, otherwise a retry
    just repeats the stale write.

    Args:
        kind: Resource kind, used for metrics and logs
        fn: Read-modify-write function
        attempts: Maximum number of calls
        interval: Fixed delay between calls in seconds

    Returns:
        Whatever ``fn`` returns

    Raises:
        ConflictError: If every attempt conflicted
    """
    attempts = attempts or config.STATUS_UPDATE_ATTEMPTS
    interval = config.STATUS_UPDATE_INTERVAL_SECONDS if interval is None else interval

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except ConflictError:
            metrics.status_update_conflicts_total.labels(kind=kind).inc()
            if attempt >= attempts:
                logger.warning(f"{kind} write still conflicting after {attempts} attempts")
                raise
            time.sleep(interval)

    raise AssertionError("unreachable")


def update_status_with_retry(
    store: Any,
    kind: str,
    namespace: str,
    name: str,
    mutate: Callable[[dict[str, Any]], dict[str, Any]],
    attempts: int | None = None,
    interval: float | None = None,
) -> bool:
    """Apply ``mutate`` to the latest status of an object and write it back.

    Each attempt fetches the latest version, hands a deep copy of its status to
    ``mutate`` and issues a conditional status update. When the computed
    status equals the stored one the write is skipped.

    Args:
        store: Resource store
        kind: Resource kind
        namespace: Object namespace
        name: Object name
        mutate: Function returning the desired status given the current one
        attempts: Maximum number of attempts
        interval: Fixed delay between attempts in seconds

    Returns:
        True if a write was issued, False if the status was already current
    """

    def _attempt() -> bool:
        obj = store.get(kind, namespace, name)
        current = obj.get("status") or {}
        desired = mutate(copy.deepcopy(current))
        if desired == current:
            return False

        updated = copy.deepcopy(obj)
        updated["status"] = desired
        store.update_status(kind, updated)
        return True

    return retry_on_conflict(kind, _attempt, attempts=attempts, interval=interval)


def set_phase(phase: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Return a status mutation that only changes the phase."""

    def _mutate(status: dict[str, Any]) -> dict[str, Any]:
        status["phase"] = phase
        return status

    return _mutate
