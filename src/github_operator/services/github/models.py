"""Models for forge repository and deploy key operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RepositoryConfig:
    """Fields sent to the forge when creating a repository."""

    name: str
    description: str = ""
    homepage: str = ""
    private: bool = False
    has_issues: bool = False
    has_projects: bool = False
    has_wiki: bool = False
    is_template: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body for the repository create call."""
        return {
            "name": self.name,
            "description": self.description,
            "homepage": self.homepage,
            "private": self.private,
            "has_issues": self.has_issues,
            "has_projects": self.has_projects,
            "has_wiki": self.has_wiki,
            "is_template": self.is_template,
        }


@dataclass
class RemoteRepository:
    """Repository as observed on the forge."""

    name: str
    full_name: str = ""
    html_url: str = ""
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RemoteRepository:
        return cls(
            name=data.get("name", ""),
            full_name=data.get("full_name", ""),
            html_url=data.get("html_url", ""),
            forks_count=data.get("forks_count") or 0,
            stargazers_count=data.get("stargazers_count") or 0,
            watchers_count=data.get("watchers_count") or 0,
        )


@dataclass
class RemoteKey:
    """Deploy key as observed on the forge."""

    id: int
    key: str = ""
    title: str = ""
    read_only: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RemoteKey:
        return cls(
            id=int(data.get("id") or 0),
            key=data.get("key", ""),
            title=data.get("title", ""),
            read_only=bool(data.get("read_only", False)),
        )
