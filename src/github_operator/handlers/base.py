"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import kopf

from .. import config, metrics
from ..logging import log_resource_event
from ..services.github.base import ForgeClient
from ..tracing import reconcile_span
from ..utils.errors import NotFoundError, SecretMismatchError, sanitize_exception
from ..utils.events import emit_reconcile_failed, emit_reconcile_started
from ..utils.status import retry_on_conflict, set_phase, update_status_with_retry


@dataclass
class ReconcileResult:
    """Outcome of a reconcile pass.

    ``requeue_after`` is None when the object is stable and only the periodic
    resync should visit it again.
    """

    requeue_after: float | None = None


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(
        self,
        kind: str,
        finalizer: str,
        store: Any = None,
        forge: ForgeClient | None = None,
        requeue_interval: float | None = None,
        actual_delete: bool | None = None,
    ):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "Repository", "Key")
            finalizer: Finalizer name owned by this handler
            store: Resource store (built from the cluster config when omitted)
            forge: Forge client (built from the environment when omitted)
            requeue_interval: Fixed delay for every wait state in seconds
            actual_delete: Whether remote objects are really deleted
        """
        self.kind = kind
        self.finalizer = finalizer
        self._store = store
        self._forge = forge
        self.requeue_interval = config.REQUEUE_INTERVAL_SECONDS if requeue_interval is None else requeue_interval
        self.actual_delete = config.ACTUAL_DELETE if actual_delete is None else actual_delete
        self.logger = logging.getLogger(__name__)

    @property
    def store(self) -> Any:
        if self._store is None:
            from .shared import get_store

            self._store = get_store()
        return self._store

    @property
    def forge(self) -> ForgeClient:
        if self._forge is None:
            from .shared import get_forge_client

            self._forge = get_forge_client()
        return self._forge

    def requeue(self) -> ReconcileResult:
        return ReconcileResult(requeue_after=self.requeue_interval)

    def done(self) -> ReconcileResult:
        return ReconcileResult()

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(
        self,
        level: int,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller="github-operator",
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    @staticmethod
    def deletion_requested(obj: dict[str, Any]) -> bool:
        return bool(obj.get("metadata", {}).get("deletionTimestamp"))

    def has_finalizer(self, obj: dict[str, Any]) -> bool:
        return self.finalizer in (obj.get("metadata", {}).get("finalizers") or [])

    def add_finalizer(self, obj: dict[str, Any]) -> None:
        """Attach this handler's finalizer, re-reading the object on conflict."""
        meta = obj["metadata"]

        def _add() -> None:
            latest = self.store.get(self.kind, meta["namespace"], meta["name"])
            finalizers = latest["metadata"].get("finalizers") or []
            if self.finalizer in finalizers:
                return
            latest["metadata"]["finalizers"] = finalizers + [self.finalizer]
            self.store.update(self.kind, latest)

        retry_on_conflict(self.kind, _add)
        self.log_info(meta, "Added finalizer", reason="FinalizerAdded", finalizer=self.finalizer)

    def remove_finalizer(self, obj: dict[str, Any]) -> None:
        """Detach this handler's finalizer, re-reading the object on conflict."""
        meta = obj["metadata"]

        def _remove() -> None:
            try:
                latest = self.store.get(self.kind, meta["namespace"], meta["name"])
            except NotFoundError:
                return
            finalizers = latest["metadata"].get("finalizers") or []
            if self.finalizer not in finalizers:
                return
            latest["metadata"]["finalizers"] = [f for f in finalizers if f != self.finalizer]
            self.store.update(self.kind, latest)

        retry_on_conflict(self.kind, _remove)
        self.log_info(meta, "Removed finalizer", reason="FinalizerRemoved", finalizer=self.finalizer)

    def update_status(
        self,
        obj: dict[str, Any],
        mutate: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> bool:
        """Write a status change through the retry-on-conflict protocol."""
        meta = obj["metadata"]
        return update_status_with_retry(self.store, self.kind, meta["namespace"], meta["name"], mutate)

    def set_phase(self, obj: dict[str, Any], phase: str) -> bool:
        """Set ``status.phase``; no write happens when it is already set."""
        written = self.update_status(obj, set_phase(phase))
        if written:
            metrics.resource_status_total.labels(kind=self.kind, status=phase.lower()).inc()
        return written

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        raise NotImplementedError

    def reconcile_with_metrics(
        self,
        body: dict[str, Any],
        reconcile_fn: Callable[[], ReconcileResult],
    ) -> ReconcileResult:
        """Execute reconciliation with metrics and error handling.

        Args:
            body: Kubernetes resource body
            reconcile_fn: Function to execute for reconciliation

        Returns:
            The reconcile result
        """
        meta = body.get("metadata", {})
        emit_reconcile_started(body)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            with reconcile_span(self.kind, body):
                result = reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="requeue" if result.requeue_after is not None else "success").inc()
            return result
        except Exception as e:
            sanitized_error = sanitize_exception(e)
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            emit_reconcile_failed(body, f"Reconciliation failed: {sanitized_error}")
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

    def run(self, body: dict[str, Any]) -> None:
        """Run one reconcile pass on behalf of kopf.

        Requeue results and transient failures become ``kopf.TemporaryError``
        with the fixed requeue delay; conflicts that need a human become
        ``kopf.PermanentError``.
        """
        meta = body.get("metadata", {})
        namespace = meta.get("namespace", "default")
        name = meta.get("name", "unknown")

        try:
            result = self.reconcile_with_metrics(body, lambda: self.reconcile(namespace, name))
        except SecretMismatchError as e:
            raise kopf.PermanentError(sanitize_exception(e)) from e
        except Exception as e:
            raise kopf.TemporaryError(sanitize_exception(e), delay=self.requeue_interval) from e

        if result.requeue_after is not None:
            raise kopf.TemporaryError(f"{self.kind} {namespace}/{name} requeued", delay=result.requeue_after)
