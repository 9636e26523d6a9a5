"""Base forge client interface."""

from __future__ import annotations

from typing import Protocol

from .models import RemoteKey, RemoteRepository, RepositoryConfig


class ForgeClient(Protocol):
    """Protocol defining forge repository and deploy key operations.

    Lookups return ``None`` when the remote object does not exist. Deletes
    tolerate an already absent object. Any other failure raises
    ``ForgeError``.
    """

    def get_repo(self, org: str, name: str) -> RemoteRepository | None:
        """Get a repository."""
        ...

    def create_repo(self, org: str, config: RepositoryConfig) -> None:
        """Create a repository under an organization or the authenticated user."""
        ...

    def delete_repo(self, org: str, name: str) -> None:
        """Delete a repository."""
        ...

    def get_key(self, org: str, repo: str, key_id: int) -> RemoteKey | None:
        """Get a deploy key by id."""
        ...

    def create_key(self, org: str, repo: str, title: str, public_key: str, read_only: bool) -> int:
        """Create a deploy key and return its id."""
        ...

    def delete_key(self, org: str, repo: str, key_id: int) -> None:
        """Delete a deploy key."""
        ...
