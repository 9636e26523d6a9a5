"""Utility functions for the GitHub Operator."""

from .errors import (
    ConflictError,
    ForgeError,
    NotFoundError,
    SecretMismatchError,
    SecretNotVisibleError,
    sanitize_exception,
)
from .events import emit_event
from .keygen import KeyPair, generate_rsa_keypair
from .rate_limit import handle_rate_limit_error, rate_limit_forge, rate_limit_k8s
from .secrets import public_key_matches, resolve_secret_ref, wait_for_secret
from .status import retry_on_conflict, update_status_with_retry

__all__ = [
    "ConflictError",
    "ForgeError",
    "NotFoundError",
    "SecretMismatchError",
    "SecretNotVisibleError",
    "sanitize_exception",
    "emit_event",
    "KeyPair",
    "generate_rsa_keypair",
    "rate_limit_k8s",
    "rate_limit_forge",
    "handle_rate_limit_error",
    "public_key_matches",
    "resolve_secret_ref",
    "wait_for_secret",
    "retry_on_conflict",
    "update_status_with_retry",
]
