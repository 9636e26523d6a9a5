"""Builder for repository configurations."""

from __future__ import annotations

from typing import Any

from ..services.github.models import RepositoryConfig


def create_repository_config_from_spec(name: str, spec: dict[str, Any]) -> RepositoryConfig:
    """Create a repository configuration from CRD spec.

    Args:
        name: Repository name (the Repository object's own name)
        spec: Repository CRD spec

    Returns:
        Configuration for the repository create call
    """
    settings = spec.get("settings") or {}

    return RepositoryConfig(
        name=name,
        description=spec.get("description", ""),
        homepage=spec.get("homepage", ""),
        private=settings.get("private", False),
        has_issues=settings.get("issues", False),
        has_projects=settings.get("projects", False),
        has_wiki=settings.get("wiki", False),
        is_template=settings.get("template", False),
    )


def repository_url(web_url: str, organization: str, name: str) -> str:
    """Return the browser URL of a repository."""
    return f"{web_url}/{organization}/{name}"
