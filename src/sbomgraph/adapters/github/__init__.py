"""GitHub dependency-graph SBOM acquisition."""

from __future__ import annotations

from .client import GitHubSbomClient
from .fetcher import (
    FetchedDocument,
    FetchFailure,
    FetchResult,
    fetch_sbom_documents,
    fetch_sbom_documents_async,
)

__all__ = [
    "FetchFailure",
    "FetchResult",
    "FetchedDocument",
    "GitHubSbomClient",
    "fetch_sbom_documents",
    "fetch_sbom_documents_async",
]
