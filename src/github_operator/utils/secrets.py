"""Utilities for managing deploy key Secrets."""

from __future__ import annotations

import logging
import time
from typing import Any

from ..constants import SECRET_PUBLIC_KEY
from .errors import NotFoundError, SecretNotVisibleError

logger = logging.getLogger(__name__)


def resolve_secret_ref(key_obj: dict[str, Any]) -> tuple[str, str]:
    """Return the (namespace, name) of the Secret backing a Key.

    The Secret defaults to the Key's own namespace and name; the Key's
    ``secretTemplate`` can override either.
    """
    meta = key_obj.get("metadata", {})
    template = key_obj.get("spec", {}).get("secretTemplate") or {}
    namespace = template.get("targetNamespace") or meta.get("namespace", "default")
    name = template.get("nameOverride") or meta.get("name")
    return namespace, name


def build_owner_reference(obj: dict[str, Any]) -> dict[str, Any]:
    """Build a controller owner reference pointing at ``obj``."""
    meta = obj.get("metadata", {})
    return {
        "apiVersion": obj.get("apiVersion"),
        "kind": obj.get("kind"),
        "name": meta.get("name"),
        "uid": meta.get("uid"),
        "controller": True,
        "blockOwnerDeletion": True,
    }


def owner_references_for(owner: dict[str, Any], secret_namespace: str) -> list[dict[str, Any]]:
    """Return owner references for a Secret created on behalf of ``owner``.

    Owner references only work within a namespace, so a Secret placed in a
    different namespace gets none and is left behind when the owner goes.
    """
    if secret_namespace != owner.get("metadata", {}).get("namespace"):
        return []
    return [build_owner_reference(owner)]


def public_key_matches(status_public_key: str | None, secret: dict[str, Any]) -> bool:
    """Check whether the Secret holds the public key recorded in a Key status."""
    secret_public_key = ((secret.get("data") or {}).get(SECRET_PUBLIC_KEY) or "").strip()
    if not secret_public_key:
        return False
    return (status_public_key or "").strip() == secret_public_key


def wait_for_secret(
    store: Any,
    namespace: str,
    name: str,
    attempts: int = 10,
    interval: float = 0.01,
) -> dict[str, Any]:
    """Poll until a freshly created Secret can be read back.

    Args:
        store: Resource store
        namespace: Secret namespace
        name: Secret name
        attempts: Maximum number of reads
        interval: Delay before each read in seconds

    Returns:
        The Secret

    Raises:
        SecretNotVisibleError: If the Secret is still not readable
    """
    for attempt in range(1, attempts + 1):
        time.sleep(interval)
        try:
            secret = store.get_secret(namespace, name)
        except NotFoundError:
            continue
        logger.info(f"Secret {namespace}/{name} visible after {attempt} fetch attempts")
        return secret

    raise SecretNotVisibleError(
        f"Secret {namespace}/{name} not visible after {attempts} fetch attempts"
    )
