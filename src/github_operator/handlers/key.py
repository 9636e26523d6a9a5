"""Handler for Key CRD."""

from __future__ import annotations

from typing import Any

import kopf

from .. import config, metrics
from ..builders.repository import repository_url
from ..constants import (
    API_GROUP_VERSION,
    KEY_FINALIZER,
    KIND_KEY,
    KIND_REPOSITORY,
    PHASE_CREATING,
    PHASE_DELETING,
    PHASE_SYNCED,
    PHASE_WAITING,
    SECRET_PUBLIC_KEY,
)
from ..utils.errors import NotFoundError, SecretMismatchError
from ..utils.events import (
    emit_key_created,
    emit_key_deleted,
    emit_key_drift,
    emit_secret_conflict,
    emit_secret_created,
)
from ..utils.keygen import generate_rsa_keypair
from ..utils.secrets import (
    owner_references_for,
    public_key_matches,
    resolve_secret_ref,
    wait_for_secret,
)
from .base import BaseHandler, ReconcileResult


class KeyHandler(BaseHandler):
    """Handler for Key resources.

    A Key owns an RSA keypair stored in a Secret and a deploy key on the
    repository referenced by ``spec.repositoryRef``. The remote key is only
    created once the Secret matches ``status.publicKey`` and the Repository
    is Synced. The forge cannot update a deploy key in place, so drift is
    remediated by deleting the remote key and letting a later pass create it
    again.
    """

    def __init__(
        self,
        web_url: str | None = None,
        key_bits: int | None = None,
        secret_visibility_attempts: int | None = None,
        secret_visibility_interval: float | None = None,
        **kwargs: Any,
    ):
        """Initialize key handler."""
        super().__init__(KIND_KEY, KEY_FINALIZER, **kwargs)
        self.web_url = web_url or config.GITHUB_WEB_URL
        self.key_bits = key_bits or config.KEY_BITS
        self.secret_visibility_attempts = secret_visibility_attempts or config.SECRET_VISIBILITY_ATTEMPTS
        if secret_visibility_interval is None:
            secret_visibility_interval = config.SECRET_VISIBILITY_INTERVAL_SECONDS
        self.secret_visibility_interval = secret_visibility_interval

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Reconcile a Key resource."""
        try:
            key = self.store.get(KIND_KEY, namespace, name)
        except NotFoundError:
            return self.done()

        meta = key["metadata"]
        spec = key.get("spec", {})
        status = key.get("status") or {}

        # Deletion goes first so nothing below can block finalizer cleanup
        if self.deletion_requested(key):
            if self.has_finalizer(key):
                self.log_info(meta, "Handling deletion", reason="Deleting")
                self.handle_deletion(key)
            return self.done()

        secret_ns, secret_name = resolve_secret_ref(key)
        try:
            secret = self.store.get_secret(secret_ns, secret_name)
        except NotFoundError:
            return self._materialize_secret(key, secret_ns, secret_name)

        if not public_key_matches(status.get("publicKey"), secret):
            message = (
                f"Referenced Secret {secret_ns}/{secret_name} does not match the status.publicKey "
                f"of the {name} Key resource. This is not automatically reconcilable. Please either "
                f"check and remove the conflicting Secret, or re-create the Key with a non-colliding name."
            )
            emit_secret_conflict(key, message)
            raise SecretMismatchError(message)

        repository_ref = spec.get("repositoryRef", "")
        try:
            repository = self.store.get(KIND_REPOSITORY, namespace, repository_ref)
        except NotFoundError:
            self.log_info(meta, f"Referenced repository {repository_ref} does not exist", reason="RepositoryNotFound")
            return self.requeue()

        if (repository.get("status") or {}).get("phase") != PHASE_SYNCED:
            self.set_phase(key, PHASE_WAITING)
            self.log_info(meta, f"Referenced repository {repository_ref} not yet synced", reason="Waiting")
            return self.requeue()

        # Local prerequisites hold; the finalizer must exist before anything remote does
        if not self.has_finalizer(key):
            self.add_finalizer(key)
            self.set_phase(key, PHASE_CREATING)
            return self.requeue()

        organization = repository.get("spec", {}).get("organization", "")
        repository_name = repository["metadata"]["name"]
        public_key = secret["data"][SECRET_PUBLIC_KEY]

        key_id = int(status.get("remoteKeyID") or 0)
        if key_id == 0:
            self.log_info(meta, "Creating new deploy key", reason="Creating")
            return self._create_remote_key(key, organization, repository_name, public_key)

        # The tracked location is authoritative for an existing remote key
        tracked_org = status.get("remoteOrganization") or organization
        tracked_repo = status.get("remoteRepository") or repository_name

        remote = self.forge.get_key(tracked_org, tracked_repo, key_id)
        if remote is None:
            self.log_info(
                meta,
                f"Expected deploy key {key_id} not found, creating new key",
                reason="Creating",
                missing_id=key_id,
            )
            return self._create_remote_key(key, organization, repository_name, public_key)

        moved = (tracked_org, tracked_repo) != (organization, repository_name)
        drifted = (
            remote.key.strip() != (status.get("publicKey") or "").strip()
            or remote.read_only != bool(spec.get("readOnly", False))
        )
        if drifted or moved:
            metrics.drift_detected_total.labels(kind=KIND_KEY, resource_type="deploy_key").inc()
            emit_key_drift(key, key_id)
            self.log_warning(meta, f"Deploy key {key_id} drifted, deleting for recreation", reason="Drift")
            self.set_phase(key, PHASE_DELETING)
            self.forge.delete_key(tracked_org, tracked_repo, key_id)
            return self.requeue()

        self.set_phase(key, PHASE_SYNCED)
        return self.done()

    def _materialize_secret(self, key: dict[str, Any], secret_ns: str, secret_name: str) -> ReconcileResult:
        """Generate a keypair and store it in a new Secret.

        Any remote key tracked for the lost Secret is deleted first. The new
        public key is recorded in the status before the Secret is created, so a
        failed Secret create is simply retried with a fresh keypair instead of
        leaving behind a Secret the status knows nothing about.
        """
        meta = key["metadata"]
        spec = key.get("spec", {})
        status = key.get("status") or {}

        key_id = int(status.get("remoteKeyID") or 0)
        organization = status.get("remoteOrganization", "")
        repository_name = status.get("remoteRepository", "")
        if key_id != 0 and organization and repository_name:
            self.set_phase(key, PHASE_DELETING)
            self.forge.delete_key(organization, repository_name, key_id)
            emit_key_deleted(key, key_id)
            self.log_info(meta, f"Deleted deploy key {key_id} orphaned by missing secret", reason="Deleted")

        self.log_info(meta, "Referenced secret does not exist, generating new key", reason="Creating")
        keypair = generate_rsa_keypair(self.key_bits)

        self.update_status(key, lambda _: {"phase": PHASE_CREATING, "publicKey": keypair.public_key})

        template = spec.get("secretTemplate") or {}
        self.store.create_secret(
            secret_ns,
            secret_name,
            keypair.as_secret_data(),
            labels=dict(template.get("labels") or {}),
            annotations=dict(template.get("annotations") or {}),
            owner_references=owner_references_for(key, secret_ns),
        )
        emit_secret_created(key, f"{secret_ns}/{secret_name}")
        self.log_info(meta, f"Created secret {secret_ns}/{secret_name}", reason="SecretCreated")

        # The read path may lag behind the create; make sure the next pass sees the Secret
        wait_for_secret(
            self.store,
            secret_ns,
            secret_name,
            attempts=self.secret_visibility_attempts,
            interval=self.secret_visibility_interval,
        )
        return self.requeue()

    def _create_remote_key(
        self,
        key: dict[str, Any],
        organization: str,
        repository_name: str,
        public_key: str,
    ) -> ReconcileResult:
        """Create the deploy key and record where it lives."""
        meta = key["metadata"]
        read_only = bool(key.get("spec", {}).get("readOnly", False))

        self.set_phase(key, PHASE_CREATING)
        key_id = self.forge.create_key(organization, repository_name, meta["name"], public_key, read_only)
        url = f"{repository_url(self.web_url, organization, repository_name)}/settings/keys"

        def _synced(status: dict[str, Any]) -> dict[str, Any]:
            status.update({
                "phase": PHASE_SYNCED,
                "url": url,
                "remoteKeyID": key_id,
                "remoteRepository": repository_name,
                "remoteOrganization": organization,
            })
            return status

        self.update_status(key, _synced)
        metrics.resource_status_total.labels(kind=KIND_KEY, status="synced").inc()
        emit_key_created(key, key_id)
        self.log_info(meta, f"Created deploy key {key_id} on {organization}/{repository_name}", reason="Created")
        return self.requeue()

    def handle_deletion(self, key: dict[str, Any]) -> None:
        """Delete the remote key (when enabled) and release the finalizer."""
        meta = key["metadata"]
        status = key.get("status") or {}
        key_id = int(status.get("remoteKeyID") or 0)
        organization = status.get("remoteOrganization", "")
        repository_name = status.get("remoteRepository", "")

        if key_id and organization and repository_name:
            remote = self.forge.get_key(organization, repository_name, key_id)
            if remote is None:
                self.log_info(meta, f"Deploy key {key_id} already absent", reason="AlreadyDeleted")
            elif self.actual_delete:
                self.forge.delete_key(organization, repository_name, key_id)
                emit_key_deleted(key, key_id)
                self.log_info(meta, f"Deleted deploy key {key_id} on {organization}/{repository_name}", reason="Deleted")
            else:
                self.log_warning(
                    meta,
                    f"Deploy key {key_id} kept, destructive deletes are disabled",
                    reason="DeleteSkipped",
                )

        self.remove_finalizer(key)


# Global handler instance
_handler = KeyHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_KEY)
@kopf.on.update(API_GROUP_VERSION, KIND_KEY)
@kopf.on.resume(API_GROUP_VERSION, KIND_KEY)
@kopf.timer(
    API_GROUP_VERSION,
    KIND_KEY,
    interval=config.RESYNC_INTERVAL_SECONDS,
    initial_delay=config.RESYNC_INTERVAL_SECONDS,
    idle=config.RESYNC_INTERVAL_SECONDS,
)
def handle_key(body: kopf.Body, **kwargs: Any) -> None:
    """Handle Key resource reconciliation."""
    _handler.run(body)


@kopf.on.delete(API_GROUP_VERSION, KIND_KEY)
def handle_key_delete(body: kopf.Body, **kwargs: Any) -> None:
    """Handle Key resource deletion."""
    _handler.run(body)
