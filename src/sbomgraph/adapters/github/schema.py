"""GitHub dependency-graph SBOM export envelope."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GitHubSbomResponse(BaseModel):
    """``GET /repos/{owner}/{repo}/dependency-graph/sbom`` wraps the SPDX document."""

    model_config = ConfigDict(extra="ignore")

    sbom: dict[str, object]


class GitHubErrorResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    documentation_url: str | None = None
