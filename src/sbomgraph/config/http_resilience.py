"""HTTP behaviour for the SBOM and license-list sources.

Both upstreams are read-only JSON APIs, so only idempotent methods are retried
and every response is a candidate for the cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import httpx

from sbomgraph import __version__

if TYPE_CHECKING:
    from collections.abc import Mapping

USER_AGENT = f"sbomgraph/{__version__}"
ONE_DAY_SECONDS = 24 * 60 * 60

type CacheBackend = Literal["sqlite", "memory"]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retry schedule handed to ``httpx_retries.Retry``."""

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = frozenset({"GET", "HEAD"})
    status_forcelist: frozenset[int] = frozenset({429, 500, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache; ``sqlite`` survives between runs, ``memory`` does not.

    ``sqlite_path`` defaults to the file from ``get_http_cache_path``.
    """

    enabled: bool = True
    backend: CacheBackend = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    default_headers: Mapping[str, str] | None = None
    user_agent: str = USER_AGENT

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every request: the user agent plus ``default_headers``."""

        headers = {"User-Agent": self.user_agent}
        if self.default_headers:
            headers.update(self.default_headers)
        return headers
