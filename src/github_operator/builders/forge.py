"""Builder for forge client instances."""

from __future__ import annotations

from .. import config
from ..services.github.client import GitHubClient


def create_forge_client_from_env() -> GitHubClient:
    """Create a forge client from operator configuration.

    Returns:
        Configured GitHub client

    Raises:
        ValueError: If no API token is configured
    """
    if not config.GITHUB_AUTH_TOKEN:
        raise ValueError("GITHUB_AUTH_TOKEN is required")

    return GitHubClient(
        token=config.GITHUB_AUTH_TOKEN,
        api_url=config.GITHUB_API_URL,
        timeout=config.GITHUB_REQUEST_TIMEOUT_SECONDS,
    )
