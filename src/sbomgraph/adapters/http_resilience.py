"""Shared async HTTP client for SBOM and license-list downloads.

Requests go through ``aiolimiter`` (optional rate limit), ``hishel`` (response
cache) and ``httpx_retries`` (retry on transient failures), in that order.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from sbomgraph.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from httpx._types import URLTypes

    from sbomgraph.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = logging.getLogger(__name__)

CACHE_BACKENDS = frozenset({"sqlite", "memory"})

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def build_cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    """Hishel storage for ``config``, or ``None`` when caching is off."""

    if config is None or not config.enabled:
        return None
    if config.backend not in CACHE_BACKENDS:
        msg = f"Unsupported cache backend: {config.backend}"
        raise ValueError(msg)
    if config.backend == "memory":
        database_path = ":memory:"
    else:
        database_path = config.sqlite_path or str(get_http_cache_path())
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )


def _build_client(config: ResilienceConfig) -> httpx.AsyncClient:
    transport = RetryTransport(retry=build_retry(config.retry))
    storage = build_cache_storage(config.cache)
    base_url = config.base_url or ""
    headers = config.request_headers()
    if storage is None:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=config.timeout_seconds,
            headers=headers,
            transport=transport,
        )
    return AsyncCacheClient(
        base_url=base_url,
        timeout=config.timeout_seconds,
        headers=headers,
        transport=transport,
        storage=storage,
    )


class ResilientClient:
    """One ``httpx.AsyncClient`` per upstream, used as an async context manager."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _build_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self,
        url: URLTypes,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        response = await self._throttled(
            lambda: self._client.get(url, headers=headers, params=params)
        )
        log.debug(
            "%s GET %s -> %s%s",
            self.config.name,
            response.request.url,
            response.status_code,
            " (cached)" if response.extensions.get("hishel_from_cache") else "",
        )
        return response

    async def _throttled(self, send: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await send()
        async with self._limiter:
            return await send()


async def http_get_resilient(
    config: ResilienceConfig,
    url: URLTypes,
    *,
    client_factory: ClientFactory | None = None,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """One-off GET through a short-lived ``ResilientClient``."""

    async with (client_factory or ResilientClient)(config) as client:
        return await client.get(url, headers=headers)
