"""Ports for acquiring raw SBOM documents."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SbomFetcher(Protocol):
    """Fetch the raw SBOM bytes published for ``owner/repo``.

    Implementations raise ``AuthenticationError`` when the credential is
    rejected and ``NetworkError`` for any other failure.
    """

    async def fetch(self, owner: str, repo: str) -> bytes: ...


__all__ = ["SbomFetcher"]
