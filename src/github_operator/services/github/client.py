"""GitHub REST API client implementation."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from ... import metrics
from ...tracing import forge_span
from ...utils.errors import ForgeError
from ...utils.rate_limit import handle_rate_limit_error, is_rate_limit_response, rate_limit_forge
from .models import RemoteKey, RemoteRepository, RepositoryConfig

logger = logging.getLogger(__name__)

API_VERSION_HEADER = "2022-11-28"


class GitHubClient:
    """GitHub forge implementation backed by ``requests``."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: Personal access token or app installation token
            api_url: REST API base URL (GitHub Enterprise installs differ)
            timeout: Per-request deadline in seconds
            session: Optional preconfigured session
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"token {token}",
            "X-GitHub-Api-Version": API_VERSION_HEADER,
        })
        self._login: str | None = None

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        expected: tuple[int, ...],
        allow_not_found: bool = False,
        json: dict[str, Any] | None = None,
    ) -> requests.Response | None:
        """Send a request and classify the response.

        Returns:
            The response, or None for a tolerated 404

        Raises:
            ForgeError: For transport failures and unexpected status codes
        """
        start_time = time.time()
        try:
            with forge_span(operation, method, path):
                try:
                    rsp = rate_limit_forge(self.session.request)(
                        method,
                        f"{self.api_url}{path}",
                        json=json,
                        timeout=self.timeout,
                    )
                except requests.RequestException as e:
                    metrics.api_call_total.labels(api_type="github", operation=operation, result="error").inc()
                    raise ForgeError(f"{operation} failed: {e}") from e

            logger.debug(f"GitHub {method} {path}: {rsp.status_code}")

            if rsp.status_code in expected:
                metrics.api_call_total.labels(api_type="github", operation=operation, result="success").inc()
                return rsp

            if rsp.status_code == 404 and allow_not_found:
                metrics.api_call_total.labels(api_type="github", operation=operation, result="not_found").inc()
                return None

            metrics.api_call_total.labels(api_type="github", operation=operation, result="error").inc()
            error = ForgeError(
                f"{operation} failed: {rsp.status_code} - {rsp.text}",
                status_code=rsp.status_code,
            )
            if is_rate_limit_response(rsp.status_code, rsp.text, rsp.headers.get("X-RateLimit-Remaining")):
                if handle_rate_limit_error(error, api_type="github"):
                    return self._request(method, path, operation, expected, allow_not_found, json)
            raise error
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="github", operation=operation).observe(duration)

    def authenticated_login(self) -> str:
        """Return the login of the token owner."""
        if self._login is None:
            rsp = self._request("GET", "/user", "get_user", expected=(200,))
            self._login = rsp.json().get("login", "")
        return self._login

    def get_repo(self, org: str, name: str) -> RemoteRepository | None:
        """Get a repository, or None if it does not exist."""
        rsp = self._request("GET", f"/repos/{org}/{name}", "get_repo", expected=(200,), allow_not_found=True)
        if rsp is None:
            metrics.forge_operations_total.labels(operation="get_repo", result="not_found").inc()
            return None
        metrics.forge_operations_total.labels(operation="get_repo", result="success").inc()
        return RemoteRepository.from_api(rsp.json())

    def create_repo(self, org: str, config: RepositoryConfig) -> None:
        """Create a repository.

        When the token owner's login equals ``org`` the repository is created
        under the user account, otherwise under the organization.
        """
        if self.authenticated_login() == org:
            path = "/user/repos"
        else:
            path = f"/orgs/{org}/repos"

        try:
            self._request("POST", path, "create_repo", expected=(201,), json=config.to_payload())
        except ForgeError as e:
            metrics.forge_operations_total.labels(operation="create_repo", result="error").inc()
            logger.error(f"Failed to create repository {org}/{config.name}: {e}")
            raise
        metrics.forge_operations_total.labels(operation="create_repo", result="success").inc()
        logger.info(f"Created repository {org}/{config.name}")

    def delete_repo(self, org: str, name: str) -> None:
        """Delete a repository; an already absent repository is not an error."""
        rsp = self._request("DELETE", f"/repos/{org}/{name}", "delete_repo", expected=(204,), allow_not_found=True)
        if rsp is None:
            logger.warning(f"Repository {org}/{name} was already absent")
            metrics.forge_operations_total.labels(operation="delete_repo", result="not_found").inc()
            return
        metrics.forge_operations_total.labels(operation="delete_repo", result="success").inc()
        logger.info(f"Deleted repository {org}/{name}")

    def get_key(self, org: str, repo: str, key_id: int) -> RemoteKey | None:
        """Get a deploy key, or None if it does not exist."""
        rsp = self._request(
            "GET", f"/repos/{org}/{repo}/keys/{key_id}", "get_key", expected=(200,), allow_not_found=True
        )
        if rsp is None:
            metrics.forge_operations_total.labels(operation="get_key", result="not_found").inc()
            return None
        metrics.forge_operations_total.labels(operation="get_key", result="success").inc()
        return RemoteKey.from_api(rsp.json())

    def create_key(self, org: str, repo: str, title: str, public_key: str, read_only: bool) -> int:
        """Create a deploy key and return its id."""
        if not public_key.strip():
            raise ValueError("public key is empty")

        try:
            rsp = self._request(
                "POST",
                f"/repos/{org}/{repo}/keys",
                "create_key",
                expected=(201,),
                json={"title": title, "key": public_key, "read_only": read_only},
            )
        except ForgeError as e:
            metrics.forge_operations_total.labels(operation="create_key", result="error").inc()
            logger.error(f"Failed to create deploy key {title} on {org}/{repo}: {e}")
            raise
        metrics.forge_operations_total.labels(operation="create_key", result="success").inc()
        return RemoteKey.from_api(rsp.json()).id

    def delete_key(self, org: str, repo: str, key_id: int) -> None:
        """Delete a deploy key; an already absent key is not an error."""
        rsp = self._request(
            "DELETE", f"/repos/{org}/{repo}/keys/{key_id}", "delete_key", expected=(204,), allow_not_found=True
        )
        if rsp is None:
            logger.warning(f"Deploy key {key_id} on {org}/{repo} was already absent")
            metrics.forge_operations_total.labels(operation="delete_key", result="not_found").inc()
            return
        metrics.forge_operations_total.labels(operation="delete_key", result="success").inc()
        logger.info(f"Deleted deploy key {key_id} on {org}/{repo}")
