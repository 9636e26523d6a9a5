"""Handler for Repository CRD."""

from __future__ import annotations

from typing import Any

import kopf

from .. import config, metrics
from ..builders.repository import create_repository_config_from_spec, repository_url
from ..constants import (
    API_GROUP_VERSION,
    KIND_REPOSITORY,
    PHASE_CREATING,
    PHASE_SYNCED,
    REPOSITORY_FINALIZER,
)
from ..utils.errors import NotFoundError
from ..utils.events import emit_repository_created, emit_repository_deleted, emit_repository_synced
from .base import BaseHandler, ReconcileResult


class RepositoryHandler(BaseHandler):
    """Handler for Repository resources."""

    def __init__(self, web_url: str | None = None, **kwargs: Any):
        """Initialize repository handler."""
        super().__init__(KIND_REPOSITORY, REPOSITORY_FINALIZER, **kwargs)
        self.web_url = web_url or config.GITHUB_WEB_URL

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Reconcile a Repository resource."""
        try:
            repository = self.store.get(KIND_REPOSITORY, namespace, name)
        except NotFoundError:
            return self.done()

        meta = repository["metadata"]
        spec = repository.get("spec", {})
        organization = spec.get("organization", "")
        full_name = f"{organization}/{name}"

        if self.deletion_requested(repository):
            if self.has_finalizer(repository):
                self.log_info(meta, "Handling deletion", reason="Deleting")
                self.handle_deletion(repository)
            return self.done()

        if not self.has_finalizer(repository):
            self.add_finalizer(repository)
            url = repository_url(self.web_url, organization, name)
            self.update_status(repository, lambda status: {"phase": PHASE_CREATING, "url": url})
            return self.requeue()

        remote = self.forge.get_repo(organization, name)
        if remote is None:
            self.log_info(meta, f"Remote repository {full_name} not found, creating", reason="Creating")
            self.forge.create_repo(organization, create_repository_config_from_spec(name, spec))
            emit_repository_created(repository, full_name)
            return self.requeue()

        def _synced(status: dict[str, Any]) -> dict[str, Any]:
            status.update({
                "phase": PHASE_SYNCED,
                "url": repository_url(self.web_url, organization, name),
                "forkCount": remote.forks_count,
                "stargazersCount": remote.stargazers_count,
                "watchersCount": remote.watchers_count,
            })
            return status

        previous_phase = repository.get("status", {}).get("phase")
        if self.update_status(repository, _synced):
            metrics.resource_status_total.labels(kind=KIND_REPOSITORY, status="synced").inc()
            if previous_phase != PHASE_SYNCED:
                emit_repository_synced(repository, full_name)
            self.log_info(meta, f"Updated status from remote repository {full_name}", reason="Synced")

        return self.done()

    def handle_deletion(self, repository: dict[str, Any]) -> None:
        """Delete the remote repository (when enabled) and release the finalizer."""
        meta = repository["metadata"]
        name = meta["name"]
        organization = repository.get("spec", {}).get("organization", "")
        full_name = f"{organization}/{name}"

        remote = self.forge.get_repo(organization, name)
        if remote is None:
            self.log_info(meta, f"Remote repository {full_name} already absent", reason="AlreadyDeleted")
        elif self.actual_delete:
            self.forge.delete_repo(organization, name)
            emit_repository_deleted(repository, full_name)
            self.log_info(meta, f"Deleted remote repository {full_name}", reason="Deleted")
        else:
            self.log_warning(
                meta,
                f"Remote repository {full_name} kept, destructive deletes are disabled",
                reason="DeleteSkipped",
            )

        self.remove_finalizer(repository)


# Global handler instance
_handler = RepositoryHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.on.update(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.on.resume(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.timer(
    API_GROUP_VERSION,
    KIND_REPOSITORY,
    interval=config.RESYNC_INTERVAL_SECONDS,
    initial_delay=config.RESYNC_INTERVAL_SECONDS,
    idle=config.RESYNC_INTERVAL_SECONDS,
)
def handle_repository(body: kopf.Body, **kwargs: Any) -> None:
    """Handle Repository resource reconciliation."""
    _handler.run(body)


@kopf.on.delete(API_GROUP_VERSION, KIND_REPOSITORY)
def handle_repository_delete(body: kopf.Body, **kwargs: Any) -> None:
    """Handle Repository resource deletion."""
    _handler.run(body)
