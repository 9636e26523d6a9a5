"""Kubernetes-backed resource store with optimistic concurrency."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Callable

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import API_GROUP, API_VERSION, FIELD_MANAGER, PLURALS
from ...utils.errors import ConflictError, NotFoundError
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s

logger = logging.getLogger(__name__)


def _decode_secret_data(data: dict[str, Any] | None) -> dict[str, str]:
    result = {}
    for key, value in (data or {}).items():
        if isinstance(value, str):
            try:
                result[key] = base64.b64decode(value).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                result[key] = value
        else:
            result[key] = value.decode("utf-8")
    return result


class KubernetesStore:
    """Resource store over the Kubernetes API.

    Custom objects are plain dicts. ``update`` and ``update_status`` send the
    whole object back with its ``metadata.resourceVersion`` so the API server
    rejects writes based on a stale read with 409, which surfaces here as
    ``ConflictError``.
    """

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        core_api: client.CoreV1Api,
    ) -> None:
        self.custom_api = custom_api
        self.core_api = core_api

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(**kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            if e.status == 404:
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result="not_found").inc()
                raise NotFoundError(f"{operation}: {e.reason}") from e
            if e.status == 409:
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result="conflict").inc()
                raise ConflictError(f"{operation}: {e.reason}") from e
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            if handle_rate_limit_error(e, api_type="k8s"):
                # Retry once after rate limit backoff
                return self._call(operation, fn, **kwargs)
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Get a custom object.

        Raises:
            NotFoundError: If the object does not exist
        """
        return self._call(
            f"get_{kind.lower()}",
            self.custom_api.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURALS[kind],
            name=name,
        )

    def update(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace a custom object (metadata and spec).

        Raises:
            ConflictError: If the object changed since it was read
        """
        meta = obj["metadata"]
        return self._call(
            f"update_{kind.lower()}",
            self.custom_api.replace_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=meta["namespace"],
            plural=PLURALS[kind],
            name=meta["name"],
            body=obj,
        )

    def update_status(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the status subresource of a custom object.

        Raises:
            ConflictError: If the object changed since it was read
        """
        meta = obj["metadata"]
        return self._call(
            f"update_{kind.lower()}_status",
            self.custom_api.replace_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=meta["namespace"],
            plural=PLURALS[kind],
            name=meta["name"],
            body=obj,
        )

    def get_secret(self, namespace: str, name: str) -> dict[str, Any]:
        """Read a Secret with its data base64-decoded.

        Raises:
            NotFoundError: If the Secret does not exist
        """
        secret = self._call(
            "get_secret",
            self.core_api.read_namespaced_secret,
            name=name,
            namespace=namespace,
        )
        return {
            "metadata": {
                "name": secret.metadata.name,
                "namespace": secret.metadata.namespace,
                "labels": secret.metadata.labels or {},
                "annotations": secret.metadata.annotations or {},
            },
            "data": _decode_secret_data(secret.data),
        }

    def create_secret(
        self,
        namespace: str,
        name: str,
        data: dict[str, str],
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
        owner_references: list[dict[str, Any]] | None = None,
    ) -> None:
        """Create an Opaque Secret.

        Raises:
            ConflictError: If a Secret with that name already exists
        """
        secret = client.V1Secret(
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=labels or None,
                annotations=annotations or None,
                owner_references=owner_references or None,
            ),
            type="Opaque",
            data={k: base64.b64encode(v.encode("utf-8")).decode("utf-8") for k, v in data.items()},
        )
        self._call(
            "create_secret",
            self.core_api.create_namespaced_secret,
            namespace=namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )
