"""HTTP client for the GitHub dependency-graph SBOM export."""

from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from sbomgraph.adapters.http_resilience import ResilientClient
from sbomgraph.domain.errors import AuthenticationError, NetworkError

from .schema import GitHubErrorResponse, GitHubSbomResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sbomgraph.config.github import GitHubConfig
    from sbomgraph.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

AUTHENTICATION_STATUSES = frozenset({401, 403, 404})


class GitHubSbomClient:
    """Fetch SPDX JSON documents exported by GitHub's dependency graph."""

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def sbom_url(self, owner: str, repo: str) -> str:
        return f"{self._config.api_url}/repos/{owner}/{repo}/dependency-graph/sbom"

    async def fetch(self, owner: str, repo: str) -> bytes:
        """Return the SPDX document for ``owner/repo`` as JSON bytes."""

        async with self._client_factory(self._resilience) as client:
            return await self._fetch_with(client, owner=owner, repo=repo)

    async def fetch_many(
        self,
        repositories: Iterable[tuple[str, str]],
    ) -> list[bytes | BaseException]:
        """Fetch concurrently over one client; results follow the input order."""

        async with self._client_factory(self._resilience) as client:
            return await asyncio.gather(
                *(self._fetch_with(client, owner=owner, repo=repo) for owner, repo in repositories),
                return_exceptions=True,
            )

    async def _fetch_with(self, client: ResilientClient, *, owner: str, repo: str) -> bytes:
        url = self.sbom_url(owner, repo)
        try:
            response = await client.get(
                url,
                headers={"Authorization": f"Bearer {self._config.token}"},
            )
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request for {owner}/{repo} SBOM failed: {exc}") from exc

        if response.status_code in AUTHENTICATION_STATUSES:
            raise AuthenticationError(
                f"GitHub refused the SBOM for {owner}/{repo} "
                f"({response.status_code}): {_error_message(response)}"
            )
        if response.is_error:
            raise NetworkError(
                f"GitHub returned {response.status_code} for {owner}/{repo}: "
                f"{_error_message(response)}"
            )

        try:
            envelope = GitHubSbomResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise NetworkError(f"Unexpected SBOM response for {owner}/{repo}") from exc
        log.debug("Fetched SBOM for %s/%s (%s bytes)", owner, repo, len(response.content))
        return json.dumps(envelope.sbom).encode("utf-8")


def _error_message(response: httpx.Response) -> str:
    try:
        return GitHubErrorResponse.model_validate_json(response.content).message
    except ValidationError:
        return response.reason_phrase
