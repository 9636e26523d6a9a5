"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_KEY_CREATED,
    EVENT_REASON_KEY_DELETED,
    EVENT_REASON_KEY_DRIFT,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_REPOSITORY_CREATED,
    EVENT_REASON_REPOSITORY_DELETED,
    EVENT_REASON_REPOSITORY_SYNCED,
    EVENT_REASON_SECRET_CONFLICT,
    EVENT_REASON_SECRET_CREATED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body (apiVersion, kind and metadata are used)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_repository_created(body: dict[str, Any], full_name: str) -> None:
    """Emit repository created event."""
    emit_event(body, EVENT_REASON_REPOSITORY_CREATED, f"Repository {full_name} created")


def emit_repository_synced(body: dict[str, Any], full_name: str) -> None:
    """Emit repository synced event."""
    emit_event(body, EVENT_REASON_REPOSITORY_SYNCED, f"Repository {full_name} synced")


def emit_repository_deleted(body: dict[str, Any], full_name: str) -> None:
    """Emit repository deleted event."""
    emit_event(body, EVENT_REASON_REPOSITORY_DELETED, f"Repository {full_name} deleted")


def emit_key_created(body: dict[str, Any], key_id: int) -> None:
    """Emit deploy key created event."""
    emit_event(body, EVENT_REASON_KEY_CREATED, f"Deploy key {key_id} created")


def emit_key_deleted(body: dict[str, Any], key_id: int) -> None:
    """Emit deploy key deleted event."""
    emit_event(body, EVENT_REASON_KEY_DELETED, f"Deploy key {key_id} deleted")


def emit_key_drift(body: dict[str, Any], key_id: int) -> None:
    """Emit deploy key drift event."""
    emit_event(
        body,
        EVENT_REASON_KEY_DRIFT,
        f"Deploy key {key_id} does not match the declared state and will be recreated",
        type_="Warning",
    )


def emit_secret_created(body: dict[str, Any], secret_ref: str) -> None:
    """Emit secret created event."""
    emit_event(body, EVENT_REASON_SECRET_CREATED, f"Secret {secret_ref} created")


def emit_secret_conflict(body: dict[str, Any], message: str) -> None:
    """Emit secret conflict event."""
    emit_event(body, EVENT_REASON_SECRET_CONFLICT, message, type_="Warning")
