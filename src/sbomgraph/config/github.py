"""GitHub dependency-graph configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_value, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 30.0
GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds the GitHub token and HTTP behaviour for SBOM acquisition."""

    token: str
    resilience: ResilienceConfig

    @property
    def api_url(self) -> str:
        return (self.resilience.base_url or DEFAULT_GITHUB_API_URL).rstrip("/")


def default_github_resilience(api_url: str = DEFAULT_GITHUB_API_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="github",
        base_url=api_url,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=CacheConfig(backend="memory"),
        default_headers={
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        },
    )


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    values = require_env_vars(("GITHUB_TOKEN",))
    api_url = env_value("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL
    return GitHubConfig(
        token=values["GITHUB_TOKEN"],
        resilience=resilience or default_github_resilience(api_url),
    )
