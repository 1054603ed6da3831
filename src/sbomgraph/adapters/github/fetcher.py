"""Fetch an ordered list of repository SBOMs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sbomgraph.domain.errors import AcquisitionError

from .client import GitHubSbomClient

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sbomgraph.adapters.http_resilience import ResilientClient
    from sbomgraph.config.github import GitHubConfig
    from sbomgraph.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FetchedDocument:
    owner: str
    repo: str
    raw: bytes

    @property
    def document_id(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class FetchFailure:
    owner: str
    repo: str
    error: AcquisitionError

    @property
    def document_id(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class FetchResult:
    documents: tuple[FetchedDocument, ...] = ()
    failures: tuple[FetchFailure, ...] = ()


async def fetch_sbom_documents_async(
    repositories: Iterable[tuple[str, str]],
    config: GitHubConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> FetchResult:
    """Fetch every repository concurrently; acquisition errors are collected."""

    targets = [(owner, repo) for owner, repo in repositories]
    if not targets:
        return FetchResult()
    client = GitHubSbomClient(config=config, client_factory=client_factory)
    outcomes = await client.fetch_many(targets)

    documents: list[FetchedDocument] = []
    failures: list[FetchFailure] = []
    for (owner, repo), outcome in zip(targets, outcomes, strict=True):
        if isinstance(outcome, AcquisitionError):
            log.warning("Could not fetch SBOM for %s/%s: %s", owner, repo, outcome)
            failures.append(FetchFailure(owner=owner, repo=repo, error=outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            documents.append(FetchedDocument(owner=owner, repo=repo, raw=outcome))
    return FetchResult(documents=tuple(documents), failures=tuple(failures))


def fetch_sbom_documents(
    repositories: Iterable[tuple[str, str]],
    config: GitHubConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> FetchResult:
    return asyncio.run(
        fetch_sbom_documents_async(repositories, config, client_factory=client_factory)
    )
